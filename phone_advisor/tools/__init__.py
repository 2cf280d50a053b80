from phone_advisor.tools.base import BaseTool, ToolDefinition, ToolResult
from phone_advisor.tools.catalog import (
    CatalogError,
    HttpProductCatalog,
    InMemoryProductCatalog,
)
from phone_advisor.tools.registry import ToolRegistry

__all__ = [
    "BaseTool", "ToolDefinition", "ToolResult",
    "CatalogError", "HttpProductCatalog", "InMemoryProductCatalog",
    "ToolRegistry",
]
