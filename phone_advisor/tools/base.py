"""Common tool interface and result types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ToolResult:
    """Outcome of a single tool execution."""
    success: bool
    data: Any = None
    error: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ToolDefinition:
    """Public description of a registered tool."""
    name: str
    description: str
    parameters: dict[str, dict[str, Any]]
    category: str  # "database" | "api" | "action" | "calculation" | "communication"


class BaseTool(ABC):
    """
    A named async operation the workflow executor can invoke.

    ``parameters`` documents the accepted arguments; it is informational
    and never validated before ``execute`` is called.
    """

    name: str = ""
    description: str = ""
    category: str = "action"
    parameters: dict[str, dict[str, Any]] = {}

    @abstractmethod
    async def execute(self, params: dict[str, Any]) -> ToolResult:
        """Run the tool with the given parameters."""

    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name=self.name,
            description=self.description,
            parameters=dict(self.parameters),
            category=self.category,
        )
