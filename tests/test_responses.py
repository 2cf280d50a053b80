"""Tests for canned responses and clarifying questions."""

import random

from phone_advisor.prompts.responses import (
    EMOTIONAL_OVERRIDES,
    GENERAL_INQUIRY_RESPONSES,
    GENERIC_QUESTIONS,
    GREETING_RESPONSES,
    build_clarifying_questions,
    build_direct_response,
)


class TestDirectResponse:
    def test_greeting_uses_customer_name(self):
        response = build_direct_response("greeting", customer_name="Sam", rng=random.Random(0))
        assert response in [t.format(name=" Sam") for t in GREETING_RESPONSES]

    def test_greeting_without_name_has_no_placeholder(self):
        for seed in range(10):
            response = build_direct_response("greeting", rng=random.Random(seed))
            assert "{name}" not in response

    def test_unknown_intent_uses_general_pool(self):
        response = build_direct_response("technical_support", rng=random.Random(1))
        assert response in GENERAL_INQUIRY_RESPONSES

    def test_emotion_overrides_pool(self):
        assert build_direct_response("greeting", "frustrated") == EMOTIONAL_OVERRIDES["frustrated"]
        assert build_direct_response("greeting", "excited") == EMOTIONAL_OVERRIDES["excited"]

    def test_urgent_has_no_override(self):
        response = build_direct_response("general_inquiry", "urgent", rng=random.Random(2))
        assert response in GENERAL_INQUIRY_RESPONSES


class TestClarifyingQuestions:
    def test_generic_questions_by_default(self):
        assert build_clarifying_questions("something") == GENERIC_QUESTIONS[:3]

    def test_camera_question_first(self):
        questions = build_clarifying_questions("a good camera")
        assert questions[0].startswith("Are you looking for the best camera phone")

    def test_gaming_precedes_camera(self):
        questions = build_clarifying_questions("camera and gaming")
        assert "gaming" in questions[0]
        assert "camera" in questions[1]
        assert questions[2] == GENERIC_QUESTIONS[0]

    def test_limit(self):
        assert len(build_clarifying_questions("camera", limit=1)) == 1
