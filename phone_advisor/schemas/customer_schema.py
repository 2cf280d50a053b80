"""Customer profile and conversation memory models."""

from typing import Any, Optional

from pydantic import BaseModel, Field

from phone_advisor.utils import utc_now_iso


class CustomerPreferences(BaseModel):
    budget_range: str = ""  # "low" | "mid" | "high" | ""
    primary_use: str = ""  # "photography" | "gaming" | "business" | "daily_use" | ""
    brand_loyalty: list[str] = Field(default_factory=list)
    feature_priorities: list[str] = Field(default_factory=list)
    price_sensitivity: str = "medium"
    tech_savviness: str = "intermediate"


class PurchaseRecord(BaseModel):
    date: str
    product: str
    brand: str
    price: float
    satisfaction: int = Field(ge=1, le=10)
    feedback: Optional[str] = None


class Interaction(BaseModel):
    timestamp: str = Field(default_factory=utc_now_iso)
    type: str  # "chat" | "comparison" | "scan" | "purchase"
    context: dict[str, Any] = Field(default_factory=dict)
    outcome: Optional[str] = None


class CustomerInsights(BaseModel):
    persona: str = "feature_seeker"
    likelihood_to_purchase: float = Field(default=0.5, ge=0.0, le=1.0)
    preferred_communication_style: str = "casual"
    decision_timeline: str = "researching"


class CustomerProfile(BaseModel):
    """Behavioural profile for a returning customer."""

    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None

    preferences: CustomerPreferences = Field(default_factory=CustomerPreferences)
    purchase_history: list[PurchaseRecord] = Field(default_factory=list)
    interactions: list[Interaction] = Field(default_factory=list)
    insights: CustomerInsights = Field(default_factory=CustomerInsights)

    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)


class MemoryEntry(BaseModel):
    """A short-term memory item ranked by importance."""

    key: str
    value: Any = None
    timestamp: str = Field(default_factory=utc_now_iso)
    importance: int = Field(default=5, ge=1, le=10)


class LongTermPattern(BaseModel):
    """A recurring pattern observed across a session."""

    pattern: str
    frequency: int = 1
    last_seen: str = Field(default_factory=utc_now_iso)
    context: dict[str, Any] = Field(default_factory=dict)


class ConversationMemory(BaseModel):
    """Per-session memory used to bias classification and responses."""

    session_id: str
    customer_id: Optional[str] = None
    current_intent: str = "greeting"
    active_phones: list[str] = Field(default_factory=list)
    short_term_memory: list[MemoryEntry] = Field(default_factory=list)
    long_term_memory: list[LongTermPattern] = Field(default_factory=list)
