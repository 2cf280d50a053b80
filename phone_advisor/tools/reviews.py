"""Mock review and sentiment analysis for phones."""

import random
from typing import Any, Optional

from phone_advisor.tools.base import BaseTool, ToolResult
from phone_advisor.utils import utc_now_iso

KEY_TOPICS = [
    {"topic": "camera_quality", "sentiment": "positive", "mentions": 234},
    {"topic": "battery_life", "sentiment": "mixed", "mentions": 189},
    {"topic": "build_quality", "sentiment": "positive", "mentions": 156},
    {"topic": "performance", "sentiment": "positive", "mentions": 298},
]
PROS = ["Great camera", "Fast performance", "Nice design"]
CONS = ["Expensive", "Battery could be better", "No headphone jack"]


class ReviewAnalysisTool(BaseTool):
    """Analyze customer reviews and ratings for phones."""

    name = "review_analysis"
    description = "Analyze customer reviews and ratings for phones"
    category = "api"
    parameters = {
        "phone_id": {"type": "string", "description": "Phone ID to analyze", "required": True},
        "sentiment_analysis": {"type": "boolean", "description": "Include sentiment analysis"},
    }

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    async def execute(self, params: dict[str, Any]) -> ToolResult:
        rng = self._rng
        analysis = {
            "overall_rating": rng.uniform(3.0, 5.0),
            "total_reviews": rng.randint(100, 5099),
            "sentiment": {
                "positive": rng.uniform(0.4, 0.8),
                "neutral": rng.uniform(0.1, 0.4),
                "negative": rng.uniform(0.05, 0.25),
            },
            "key_topics": [dict(topic) for topic in KEY_TOPICS],
            "pros": list(PROS),
            "cons": list(CONS),
        }
        return ToolResult(
            success=True,
            data=analysis,
            metadata={"phone_id": params.get("phone_id"), "analysis_date": utc_now_iso()},
        )
