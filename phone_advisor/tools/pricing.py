"""
Mock multi-retailer price comparison.

In production, this would call retailer pricing APIs or a price
aggregation service over HTTP.
"""

import logging
import random
from typing import Any, Optional, TypedDict

from phone_advisor.tools.base import BaseTool, ToolResult

logger = logging.getLogger(__name__)


class RetailerOffer(TypedDict):
    """One retailer's offer for a phone model."""

    retailer: str
    price: int
    availability: str
    shipping: str
    rating: int


DEFAULT_RETAILERS = ["Best Buy", "Amazon", "Apple Store", "Carrier Direct"]

# Offer generation parameters
MIN_PRICE = 200
PRICE_SPREAD = 500
IN_STOCK_PROBABILITY = 0.8
FREE_SHIPPING_PROBABILITY = 0.5


def cheapest_in_stock(offers: list[RetailerOffer]) -> Optional[RetailerOffer]:
    """Return the lowest-priced in-stock offer, or None when nothing is in stock."""
    in_stock = [o for o in offers if o["availability"] == "in_stock"]
    if not in_stock:
        return None
    return min(in_stock, key=lambda o: o["price"])


class PriceComparisonTool(BaseTool):
    """Compare prices across multiple retailers."""

    name = "price_comparison"
    description = "Compare prices across multiple retailers"
    category = "api"
    parameters = {
        "phone_model": {
            "type": "string",
            "description": "Phone model to search for",
            "required": True,
        },
        "retailers": {"type": "array", "description": "List of retailers to check"},
    }

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    async def execute(self, params: dict[str, Any]) -> ToolResult:
        phone_model = params.get("phone_model")
        retailers = params.get("retailers") or DEFAULT_RETAILERS

        offers: list[RetailerOffer] = [
            {
                "retailer": retailer,
                "price": self._rng.randrange(PRICE_SPREAD) + MIN_PRICE,
                "availability": (
                    "in_stock" if self._rng.random() < IN_STOCK_PROBABILITY else "out_of_stock"
                ),
                "shipping": "free" if self._rng.random() < FREE_SHIPPING_PROBABILITY else "paid",
                "rating": self._rng.randint(1, 5),
            }
            for retailer in retailers
        ]
        offers.sort(key=lambda o: o["price"])

        best = cheapest_in_stock(offers)
        logger.debug(
            "Price comparison for %s: %d offers, best=%s",
            phone_model, len(offers), best["retailer"] if best else None,
        )
        return ToolResult(
            success=True,
            data={"phone_model": phone_model, "prices": offers, "best_deal": best},
        )
