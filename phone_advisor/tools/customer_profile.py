"""Customer profile analysis tool reading from the memory store."""

from typing import Any

from phone_advisor.conversation.memory import MemoryStore
from phone_advisor.schemas.customer_schema import CustomerProfile
from phone_advisor.tools.base import BaseTool, ToolResult


class CustomerProfileTool(BaseTool):
    """Summarise a customer's stated preferences and derived insights."""

    name = "customer_profile_analysis"
    description = "Gather customer preferences and derived insights"
    category = "database"
    parameters = {
        "customer_id": {"type": "string", "description": "Customer ID"},
        "session_context": {"type": "object", "description": "Current session context"},
    }

    def __init__(self, memory: MemoryStore) -> None:
        self._memory = memory

    async def execute(self, params: dict[str, Any]) -> ToolResult:
        customer_id = params.get("customer_id")
        profile = self._memory.get_customer_profile(customer_id) if customer_id else None
        known = profile is not None
        if profile is None:
            profile = CustomerProfile(id=customer_id or "anonymous")

        return ToolResult(
            success=True,
            data={
                "customer_id": customer_id,
                "known_customer": known,
                "preferences": profile.preferences.model_dump(),
                "insights": profile.insights.model_dump(),
            },
            metadata={"session_context": params.get("session_context") or {}},
        )
