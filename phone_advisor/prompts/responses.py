"""Canned response text for direct answers and clarification turns."""

import random
from typing import Optional

GREETING_RESPONSES = [
    "Hey there{name}! I'm excited to help you find the perfect phone. What brings you here today?",
    "Hello{name}! Welcome back. Ready to discover some great devices?",
    "Hi there! I love helping people find their ideal phone. What can I help you with today?",
]

GENERAL_INQUIRY_RESPONSES = [
    "Great question! I can help with anything phone-related: recommendations, "
    "comparisons, or just the latest tech.",
    "I'd love to help with that. I can assist with recommendations, price comparisons, "
    "and feature explanations. What specifically interests you?",
    "That's exactly what I'm here for! Let me know what you'd like to explore.",
]

RESPONSE_POOLS: dict[str, list[str]] = {
    "greeting": GREETING_RESPONSES,
    "general_inquiry": GENERAL_INQUIRY_RESPONSES,
}

EMOTIONAL_OVERRIDES: dict[str, str] = {
    "frustrated": (
        "I understand how overwhelming phone shopping can be. Don't worry, "
        "we'll keep it simple and take it one step at a time."
    ),
    "excited": (
        "I love your enthusiasm! There are so many great phones out there, "
        "and I can't wait to help you find the perfect match."
    ),
}

CLARIFICATION_RESPONSE = (
    "I want to make sure I understand exactly what you're looking for! "
    "Could you help me with a bit more detail?"
)

ERROR_RESPONSE = (
    "I'm having trouble processing that right now. Could you please rephrase "
    "your question? I'm still here to help you find the right phone."
)

GENERIC_QUESTIONS = [
    "What type of phone are you most interested in?",
    "Are you looking for a specific brand or open to suggestions?",
    "What's your budget range?",
    "What do you primarily use your phone for?",
]

# Checked in order; each match is pushed to the front, so later entries lead.
TOPIC_QUESTIONS: list[tuple[str, str]] = [
    ("camera", "Are you looking for the best camera phone for photography or video?"),
    ("gaming", "Are you looking for a phone optimized for gaming performance?"),
]


def build_direct_response(
    intent: str,
    emotional_context: str = "neutral",
    customer_name: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Pick a canned answer; an emotional override beats the intent pool."""
    override = EMOTIONAL_OVERRIDES.get(emotional_context)
    if override:
        return override

    pool = RESPONSE_POOLS.get(intent, GENERAL_INQUIRY_RESPONSES)
    template = (rng or random).choice(pool)
    return template.format(name=f" {customer_name}" if customer_name else "")


def build_clarifying_questions(user_input: str, limit: int = 3) -> list[str]:
    """Generic questions, with topic-specific ones first when the input mentions them."""
    questions = list(GENERIC_QUESTIONS)
    for keyword, question in TOPIC_QUESTIONS:
        if keyword in user_input:
            questions.insert(0, question)
    return questions[:limit]
