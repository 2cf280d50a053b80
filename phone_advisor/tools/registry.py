"""
Tool registry: name-keyed lookup of the tools workflows can invoke.

Tasks reference tools by name only. The registry resolves the name at
execution time and converts every failure mode (unknown name, raised
exception) into a structured ToolResult so callers never see an error
escape a tool call.
"""

import logging
import random
from typing import Any, Optional

from phone_advisor.conversation.memory import MemoryStore
from phone_advisor.tools.base import BaseTool, ToolDefinition, ToolResult
from phone_advisor.tools.catalog import build_default_catalog
from phone_advisor.tools.customer_profile import CustomerProfileTool
from phone_advisor.tools.notifications import NotificationTool
from phone_advisor.tools.phone_search import PhoneDatabaseTool
from phone_advisor.tools.pricing import PriceComparisonTool
from phone_advisor.tools.recommendations import RecommendationTool
from phone_advisor.tools.reviews import ReviewAnalysisTool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """Holds tool instances for one engine."""

    def __init__(self, tools: Optional[list[BaseTool]] = None) -> None:
        self._tools: dict[str, BaseTool] = {}
        for tool in tools or []:
            self.register_tool(tool)

    @classmethod
    def with_default_tools(
        cls,
        memory: MemoryStore,
        catalog=None,
        rng: Optional[random.Random] = None,
    ) -> "ToolRegistry":
        """Build a registry holding every built-in tool."""
        search = PhoneDatabaseTool(catalog if catalog is not None else build_default_catalog())
        return cls([
            CustomerProfileTool(memory),
            search,
            PriceComparisonTool(rng),
            ReviewAnalysisTool(rng),
            RecommendationTool(search),
            NotificationTool(),
        ])

    def register_tool(self, tool: BaseTool) -> None:
        """Register a tool, replacing any existing tool with the same name."""
        self._tools[tool.name] = tool
        logger.debug("Tool registered: %s", tool.name)

    def get_tool(self, name: str) -> Optional[BaseTool]:
        return self._tools.get(name)

    def get_all_tools(self) -> list[ToolDefinition]:
        return [tool.definition() for tool in self._tools.values()]

    def get_tool_names(self) -> list[str]:
        return list(self._tools.keys())

    async def execute_tool(self, name: str, params: dict[str, Any]) -> ToolResult:
        """Run a tool by name. Never raises."""
        tool = self.get_tool(name)
        if tool is None:
            logger.warning("Tool not found: %s", name)
            return ToolResult(success=False, error=f"Tool '{name}' not found")

        try:
            return await tool.execute(params)
        except Exception as exc:
            logger.exception("Tool '%s' raised during execution", name)
            return ToolResult(success=False, error=str(exc) or "Tool execution failed")
