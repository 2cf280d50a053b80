"""
Profile-based phone recommendation scoring.

Each phone starts at a base score and gains a fixed weight for every
profile signal it matches. The combined score is capped at 1.0.
"""

import logging
from typing import Any, Optional

from phone_advisor.config import settings
from phone_advisor.tools.base import BaseTool, ToolResult
from phone_advisor.tools.phone_search import PhoneDatabaseTool

logger = logging.getLogger(__name__)

BASE_SCORE = 0.5
BUDGET_MATCH_WEIGHT = 0.3
PRIMARY_USE_WEIGHT = 0.2
BRAND_LOYALTY_WEIGHT = 0.1
MAX_SCORE = 1.0


def _preferences(profile: Optional[dict[str, Any]]) -> dict[str, Any]:
    if not profile:
        return {}
    return profile.get("preferences") or {}


def _phone_brand(phone: dict[str, Any]) -> Optional[str]:
    brand = phone.get("brand")
    if isinstance(brand, dict):
        return brand.get("name")
    return brand


def score_phone(phone: dict[str, Any], profile: Optional[dict[str, Any]]) -> float:
    """Score one phone against a customer profile dict."""
    prefs = _preferences(profile)
    score = BASE_SCORE

    budget = prefs.get("budget_range")
    if budget and budget == phone.get("price_range"):
        score += BUDGET_MATCH_WEIGHT

    primary_use = prefs.get("primary_use")
    if primary_use and primary_use in (phone.get("target_audience") or []):
        score += PRIMARY_USE_WEIGHT

    brand = _phone_brand(phone)
    if brand and brand in (prefs.get("brand_loyalty") or []):
        score += BRAND_LOYALTY_WEIGHT

    return min(MAX_SCORE, score)


def recommendation_reasons(phone: dict[str, Any], profile: Optional[dict[str, Any]]) -> list[str]:
    prefs = _preferences(profile)
    reasons = []

    budget = prefs.get("budget_range")
    if budget and budget == phone.get("price_range"):
        reasons.append(f"Perfect fit for your {phone.get('price_range')} budget")

    primary_use = prefs.get("primary_use")
    if primary_use == "photography" and "Pro Camera" in (phone.get("key_features") or []):
        reasons.append("Excellent camera system for photography")
    if primary_use == "gaming" and "gamers" in (phone.get("target_audience") or []):
        reasons.append("Optimized for gaming performance")

    return reasons


def rank_phones(
    phones: list[dict[str, Any]],
    profile: Optional[dict[str, Any]],
    top_k: int = settings.catalog.recommendation_top_k,
) -> list[dict[str, Any]]:
    """Score, sort descending (stable on ties), and keep the top ``top_k``."""
    scored = [
        {**phone, "score": score_phone(phone, profile), "reasons": recommendation_reasons(phone, profile)}
        for phone in phones
    ]
    scored.sort(key=lambda p: p["score"], reverse=True)
    return scored[:top_k]


class RecommendationTool(BaseTool):
    """Generate personalized phone recommendations based on customer profile."""

    name = "generate_recommendations"
    description = "Generate personalized phone recommendations based on customer profile"
    category = "calculation"
    parameters = {
        "customer_profile": {
            "type": "object",
            "description": "Customer profile data",
            "required": True,
        },
        "budget": {"type": "number", "description": "Budget constraint"},
        "current_phone": {"type": "string", "description": "Current phone for upgrade path"},
    }

    def __init__(
        self,
        search_tool: PhoneDatabaseTool,
        pool_size: int = settings.catalog.recommendation_pool_size,
        top_k: int = settings.catalog.recommendation_top_k,
    ) -> None:
        self._search = search_tool
        self._pool_size = pool_size
        self._top_k = top_k

    async def execute(self, params: dict[str, Any]) -> ToolResult:
        phone_result = await self._search.execute({"limit": self._pool_size})
        if not phone_result.success:
            return ToolResult(
                success=False,
                error=f"Failed to fetch phones for recommendations: {phone_result.error}",
            )

        profile = params.get("customer_profile")
        recommendations = rank_phones(phone_result.data or [], profile, self._top_k)
        logger.debug("Generated %d recommendations", len(recommendations))
        return ToolResult(
            success=True,
            data={
                "recommendations": recommendations,
                "algorithm": "profile_based_scoring",
                "confidence": 0.85,
            },
        )
