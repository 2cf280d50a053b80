"""Phone database search tool backed by the product datastore."""

import asyncio
import logging
from typing import Any

from phone_advisor.tools.base import BaseTool, ToolResult
from phone_advisor.tools.catalog import CatalogError

logger = logging.getLogger(__name__)


class PhoneDatabaseTool(BaseTool):
    """Search and filter mobile phones in the product datastore."""

    name = "phone_database_search"
    description = "Search and filter mobile phones in the database"
    category = "database"
    parameters = {
        "query": {"type": "string", "description": "Search query for phones"},
        "brand": {"type": "string", "description": "Filter by brand"},
        "price_range": {
            "type": "string",
            "enum": ["low", "mid", "high"],
            "description": "Price range filter",
        },
        "features": {"type": "array", "description": "Required features"},
        "limit": {"type": "number", "description": "Maximum results to return"},
    }

    def __init__(self, catalog) -> None:
        self._catalog = catalog

    async def execute(self, params: dict[str, Any]) -> ToolResult:
        try:
            # HttpProductCatalog blocks on network I/O.
            payload = await asyncio.to_thread(self._catalog.search, params)
        except CatalogError as exc:
            return ToolResult(success=False, error=str(exc))

        phones = payload.get("phones", [])
        logger.debug("Phone search returned %d of %s phones", len(phones), payload.get("total"))
        return ToolResult(
            success=True,
            data=phones,
            metadata={"total": payload.get("total", len(phones)), "filters_applied": params},
        )
