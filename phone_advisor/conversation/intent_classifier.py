"""
Keyword-based intent classification.

Maps a shopper's utterance plus their profile and recent memory to a
primary intent with a confidence score, secondary intents, an emotional
context label, and an urgency level. The keyword tables are the whole
model: any classifier returning an IntentAnalysis can replace this one.
"""

import logging
from typing import Optional

from phone_advisor.config import settings
from phone_advisor.schemas.customer_schema import ConversationMemory, CustomerProfile
from phone_advisor.schemas.decision_schema import IntentAnalysis

logger = logging.getLogger(__name__)

DEFAULT_INTENT = "general_inquiry"
SUB_INTENT_THRESHOLD = 0.2
PURCHASE_BOOST = 1.2
COMPARISON_CARRYOVER_BOOST = 1.1
RECENT_MEMORY_WINDOW = 3


class IntentClassifier:
    """Substring-ratio classifier over fixed keyword lists."""

    # Declaration order is the tie-break: on equal confidence the
    # earlier intent keeps the primary slot.
    INTENT_PATTERNS: dict[str, list[str]] = {
        "greeting": ["hello", "hi", "hey", "good morning", "good afternoon"],
        "product_inquiry": ["what is", "tell me about", "specs", "features", "price"],
        "recommendation": ["recommend", "suggest", "best phone", "which phone", "help me choose"],
        "comparison": ["compare", "difference", "versus", "vs", "better than"],
        "purchase_intent": ["buy", "purchase", "order", "where to buy", "price"],
        "technical_support": ["how to", "problem", "issue", "not working", "help"],
        "price_inquiry": ["cost", "price", "expensive", "cheap", "budget"],
    }

    EMOTIONAL_INDICATORS: dict[str, list[str]] = {
        "frustrated": ["confused", "frustrated", "complicated", "don't understand"],
        "excited": ["awesome", "perfect", "amazing", "love it", "exactly"],
        "urgent": ["quickly", "urgent", "asap", "immediately", "need now"],
    }

    HIGH_URGENCY_KEYWORDS = [
        "urgent", "quickly", "asap", "immediately", "need now", "buying today",
    ]
    MEDIUM_URGENCY_KEYWORDS = ["recommend", "compare", "buy"]

    PURCHASE_BOOSTED_INTENTS = frozenset({"product_inquiry", "comparison"})

    def classify(
        self,
        user_input: str,
        profile: Optional[CustomerProfile] = None,
        memory: Optional[ConversationMemory] = None,
    ) -> IntentAnalysis:
        """
        Classify an utterance.

        Args:
            user_input: Raw user text; matching is case-insensitive.
            profile: Resolved customer profile, if any.
            memory: The session's conversation memory, if any.

        Returns:
            IntentAnalysis. No keyword hits yields general_inquiry at 0.0.
        """
        text = user_input.lower()

        primary_intent = DEFAULT_INTENT
        confidence = 0.0
        sub_intents: list[str] = []

        for intent, patterns in self.INTENT_PATTERNS.items():
            ratio = self._match_ratio(text, patterns)
            if ratio > confidence:
                confidence = ratio
                primary_intent = intent
            if ratio > SUB_INTENT_THRESHOLD:
                sub_intents.append(intent)

        if (
            profile is not None
            and profile.insights.likelihood_to_purchase
            > settings.decision.purchase_likelihood_boost_threshold
            and primary_intent in self.PURCHASE_BOOSTED_INTENTS
        ):
            confidence = min(1.0, confidence * PURCHASE_BOOST)

        if memory is not None and primary_intent == "product_inquiry":
            recent = memory.short_term_memory[-RECENT_MEMORY_WINDOW:]
            if any("comparison" in entry.key for entry in recent):
                primary_intent = "comparison"
                confidence = min(1.0, confidence * COMPARISON_CARRYOVER_BOOST)

        analysis = IntentAnalysis(
            primary_intent=primary_intent,
            confidence=confidence,
            sub_intents=sub_intents,
            emotional_context=self._detect_emotion(text),
            urgency=self._detect_urgency(text),
        )
        logger.debug(
            "Intent classified: %s (%.2f), emotion=%s, urgency=%s",
            analysis.primary_intent, analysis.confidence,
            analysis.emotional_context, analysis.urgency,
        )
        return analysis

    @staticmethod
    def _match_ratio(text: str, patterns: list[str]) -> float:
        hits = sum(1 for pattern in patterns if pattern in text)
        return hits / len(patterns)

    def _detect_emotion(self, text: str) -> str:
        for emotion, indicators in self.EMOTIONAL_INDICATORS.items():
            if any(indicator in text for indicator in indicators):
                return emotion
        return "neutral"

    def _detect_urgency(self, text: str) -> str:
        if any(keyword in text for keyword in self.HIGH_URGENCY_KEYWORDS):
            return "high"
        if any(keyword in text for keyword in self.MEDIUM_URGENCY_KEYWORDS):
            return "medium"
        return "low"
