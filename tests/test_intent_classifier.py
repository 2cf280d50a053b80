"""Tests for keyword intent classification."""

import pytest

from phone_advisor.schemas.customer_schema import ConversationMemory, MemoryEntry
from tests.conftest import (
    FULL_GREETING_INPUT,
    PRICE_INPUT,
    PRODUCT_INPUT,
    RECOMMENDATION_INPUT,
)


class TestPrimaryIntent:
    def test_no_keywords_is_general_inquiry(self, classifier):
        analysis = classifier.classify("xyz")
        assert analysis.primary_intent == "general_inquiry"
        assert analysis.confidence == 0.0
        assert analysis.sub_intents == []

    def test_confidence_is_hit_ratio(self, classifier):
        analysis = classifier.classify(RECOMMENDATION_INPUT)
        assert analysis.primary_intent == "recommendation"
        assert analysis.confidence == pytest.approx(0.8)

    def test_single_keyword_scores_one_fifth(self, classifier):
        analysis = classifier.classify("recommend me a gaming phone")
        assert analysis.primary_intent == "recommendation"
        assert analysis.confidence == pytest.approx(0.2)

    def test_matching_is_case_insensitive(self, classifier):
        analysis = classifier.classify(PRICE_INPUT.upper())
        assert analysis.primary_intent == "price_inquiry"
        assert analysis.confidence == pytest.approx(0.8)

    def test_full_greeting_scores_one(self, classifier):
        analysis = classifier.classify(FULL_GREETING_INPUT)
        assert analysis.primary_intent == "greeting"
        assert analysis.confidence == pytest.approx(1.0)

    def test_tie_goes_to_first_declared_intent(self, classifier):
        # "price" is a trigger for product_inquiry, purchase_intent and price_inquiry.
        analysis = classifier.classify("price")
        assert analysis.primary_intent == "product_inquiry"
        assert analysis.confidence == pytest.approx(0.2)


class TestSubIntents:
    def test_sub_intents_need_more_than_one_hit(self, classifier):
        analysis = classifier.classify(RECOMMENDATION_INPUT)
        # greeting matched once ("hi" in "which"), which is not above 0.2
        assert analysis.sub_intents == ["recommendation"]

    def test_multiple_sub_intents(self, classifier):
        analysis = classifier.classify("compare the difference in cost, is it cheap")
        assert "comparison" in analysis.sub_intents
        assert "price_inquiry" in analysis.sub_intents


class TestProfileBoost:
    def test_likely_buyer_boosts_product_inquiry(self, classifier, memory):
        for _ in range(3):
            memory.record_interaction("cust-1", "comparison")
        profile = memory.get_customer_profile("cust-1")
        assert profile.insights.likelihood_to_purchase > 0.7

        analysis = classifier.classify(PRODUCT_INPUT, profile=profile)
        assert analysis.primary_intent == "product_inquiry"
        assert analysis.confidence == pytest.approx(0.72)

    def test_low_likelihood_leaves_confidence(self, classifier, memory):
        profile = memory.update_customer_profile("cust-2", {})
        analysis = classifier.classify(PRODUCT_INPUT, profile=profile)
        assert analysis.confidence == pytest.approx(0.6)

    def test_boost_is_capped(self, classifier, memory):
        for _ in range(5):
            memory.record_interaction("cust-3", "comparison")
        profile = memory.get_customer_profile("cust-3")
        analysis = classifier.classify(
            "compare the difference versus vs better than", profile=profile
        )
        assert analysis.confidence == pytest.approx(1.0)


class TestMemoryCarryOver:
    def test_recent_comparison_turns_inquiry_into_comparison(self, classifier):
        memory = ConversationMemory(
            session_id="s1",
            short_term_memory=[MemoryEntry(key="comparison_request", value={"phones": 2})],
        )
        analysis = classifier.classify(PRODUCT_INPUT, memory=memory)
        assert analysis.primary_intent == "comparison"
        assert analysis.confidence == pytest.approx(0.66)

    def test_older_entries_are_ignored(self, classifier):
        entries = [MemoryEntry(key="comparison_request")] + [
            MemoryEntry(key=f"note_{i}") for i in range(3)
        ]
        memory = ConversationMemory(session_id="s1", short_term_memory=entries)
        analysis = classifier.classify(PRODUCT_INPUT, memory=memory)
        assert analysis.primary_intent == "product_inquiry"


class TestEmotionAndUrgency:
    @pytest.mark.parametrize("text, emotion", [
        ("I'm so confused by all this", "frustrated"),
        ("that's awesome", "excited"),
        ("I need it asap", "urgent"),
        ("show me phones", "neutral"),
    ])
    def test_emotional_context(self, classifier, text, emotion):
        assert classifier.classify(text).emotional_context == emotion

    def test_frustrated_wins_over_excited(self, classifier):
        analysis = classifier.classify("amazing but complicated")
        assert analysis.emotional_context == "frustrated"

    @pytest.mark.parametrize("text, urgency", [
        ("buying today", "high"),
        ("please hurry, quickly", "high"),
        ("can you recommend something", "medium"),
        ("just browsing", "low"),
    ])
    def test_urgency(self, classifier, text, urgency):
        assert classifier.classify(text).urgency == urgency
