"""
Product datastore clients.

HttpProductCatalog posts search filters to an external search endpoint.
InMemoryProductCatalog serves a small fixed catalog for the console demo
and tests. Both return plain phone records:

    {"id", "brand", "name", "price_range", "key_features", "target_audience"}
"""

import logging
from typing import Any, Optional

import requests

from phone_advisor.config import settings

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when the product datastore cannot serve a search."""


SAMPLE_PHONES: list[dict[str, Any]] = [
    {
        "id": "pixel-9-pro",
        "brand": "Google",
        "name": "Pixel 9 Pro",
        "price_range": "high",
        "key_features": ["Pro Camera", "AI Editing", "7 Years Updates"],
        "target_audience": ["photography", "daily_use"],
    },
    {
        "id": "iphone-16-pro",
        "brand": "Apple",
        "name": "iPhone 16 Pro",
        "price_range": "high",
        "key_features": ["Pro Camera", "A18 Pro", "ProRes Video"],
        "target_audience": ["photography", "business"],
    },
    {
        "id": "galaxy-s24",
        "brand": "Samsung",
        "name": "Galaxy S24",
        "price_range": "mid",
        "key_features": ["120Hz Display", "Galaxy AI", "Compact"],
        "target_audience": ["daily_use", "business"],
    },
    {
        "id": "rog-phone-8",
        "brand": "Asus",
        "name": "ROG Phone 8",
        "price_range": "high",
        "key_features": ["165Hz Display", "AirTriggers", "6000mAh Battery"],
        "target_audience": ["gaming", "gamers"],
    },
    {
        "id": "poco-f6",
        "brand": "Xiaomi",
        "name": "Poco F6",
        "price_range": "mid",
        "key_features": ["Snapdragon 8s Gen 3", "Fast Charging"],
        "target_audience": ["gaming", "gamers", "daily_use"],
    },
    {
        "id": "galaxy-a35",
        "brand": "Samsung",
        "name": "Galaxy A35",
        "price_range": "low",
        "key_features": ["Long Battery", "IP67"],
        "target_audience": ["daily_use"],
    },
    {
        "id": "moto-g-power",
        "brand": "Motorola",
        "name": "Moto G Power",
        "price_range": "low",
        "key_features": ["5000mAh Battery", "Stylus-free"],
        "target_audience": ["daily_use", "business"],
    },
]


class InMemoryProductCatalog:
    """Serves phone records from a fixed in-process list."""

    def __init__(self, phones: Optional[list[dict[str, Any]]] = None) -> None:
        self._phones = list(SAMPLE_PHONES if phones is None else phones)

    def search(self, filters: dict[str, Any]) -> dict[str, Any]:
        """Filter by free-text query, brand, price range, and features."""
        results = list(self._phones)

        query = str(filters.get("query") or "").lower().strip()
        if query:
            words = query.split()
            matched = [p for p in results if any(w in _searchable_text(p) for w in words)]
            # Free-text queries are hints; an unmatched query falls back to everything.
            results = matched or results

        brand = filters.get("brand")
        if brand:
            results = [p for p in results if p["brand"].lower() == str(brand).lower()]

        price_range = filters.get("price_range")
        if price_range:
            results = [p for p in results if p["price_range"] == price_range]

        features = filters.get("features") or []
        if features:
            results = [p for p in results if all(f in p["key_features"] for f in features)]

        total = len(results)
        limit = filters.get("limit")
        if isinstance(limit, int) and limit > 0:
            results = results[:limit]

        return {"phones": [dict(p) for p in results], "total": total}


class HttpProductCatalog:
    """Searches phones through an external JSON search endpoint."""

    def __init__(
        self,
        search_url: str,
        timeout: int = settings.catalog.timeout_sec,
        auth_token: Optional[str] = settings.catalog.auth_token,
    ):
        self.search_url = search_url
        self.timeout = timeout
        self.auth_token = auth_token

    def _get_headers(self) -> dict:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": f"{settings.agent_name}/1.0",
        }
        if self.auth_token:
            headers["Authorization"] = f"Bearer {self.auth_token}"
        return headers

    def search(self, filters: dict[str, Any]) -> dict[str, Any]:
        """
        POST the filters and return the decoded ``{"phones", "total"}`` payload.

        Raises:
            CatalogError: On transport errors, non-2xx responses, or bad JSON.
        """
        try:
            response = requests.post(
                self.search_url,
                json=filters,
                headers=self._get_headers(),
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as exc:
            logger.warning("Catalog search failed: %s", exc)
            raise CatalogError(f"Catalog search failed: {exc}") from exc
        except ValueError as exc:
            raise CatalogError("Catalog returned invalid JSON") from exc

        phones = payload.get("phones") or []
        return {"phones": phones, "total": payload.get("total", len(phones))}


def build_default_catalog():
    """Use the HTTP catalog when an endpoint is configured, else the sample catalog."""
    if settings.catalog.search_url:
        return HttpProductCatalog(settings.catalog.search_url)
    return InMemoryProductCatalog()


def _searchable_text(phone: dict[str, Any]) -> str:
    parts = [phone.get("brand", ""), phone.get("name", "")]
    parts.extend(phone.get("key_features", []))
    parts.extend(phone.get("target_audience", []))
    return " ".join(parts).lower()
