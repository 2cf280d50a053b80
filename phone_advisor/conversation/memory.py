"""
Customer profiles and per-session conversation memory.

Short-term memory is a bounded list ranked by importance; long-term memory
counts recurring patterns. Both live in process, owned by one MemoryStore
instance, and can optionally be mirrored into a key-value store so they
survive a restart.

Usage:
    memory = MemoryStore()
    memory.add_to_short_term_memory("session-1", "comparison", {"phones": 2}, 7)
    recent = memory.get_conversation_memory("session-1").short_term_memory
"""

import json
import logging
import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from pydantic import ValidationError

from phone_advisor.config import settings
from phone_advisor.conversation.kv_store import SQLiteKeyValueStore
from phone_advisor.schemas.customer_schema import (
    ConversationMemory,
    CustomerInsights,
    CustomerProfile,
    Interaction,
    LongTermPattern,
    MemoryEntry,
)
from phone_advisor.utils import utc_now_iso

logger = logging.getLogger(__name__)

PROFILES_KEY = "customer_profiles"
MEMORIES_KEY = "conversation_memories"

# Insight derivation
INTERACTION_WINDOW = timedelta(hours=24)
BASE_PURCHASE_LIKELIHOOD = 0.3
CHAT_LIKELIHOOD_WEIGHT = 0.1
COMPARISON_LIKELIHOOD_WEIGHT = 0.2
MAX_PURCHASE_LIKELIHOOD = 0.95

_MIRROR_ERRORS = (sqlite3.Error, OSError, TypeError, ValueError, ValidationError)


class MemoryStore:
    """
    Owns customer profiles and conversation memories for one engine.

    Reads return deep copies so callers cannot mutate stored state
    without going through an update method.
    """

    def __init__(
        self,
        kv_store: Optional[SQLiteKeyValueStore] = None,
        short_term_limit: int = settings.memory.short_term_limit,
    ) -> None:
        self._kv_store = kv_store
        self._short_term_limit = short_term_limit
        self._profiles: dict[str, CustomerProfile] = {}
        self._memories: dict[str, ConversationMemory] = {}
        self._load_from_storage()

    # ------------------------------------------------------------------ #
    # Customer profiles
    # ------------------------------------------------------------------ #

    def get_customer_profile(self, customer_id: str) -> Optional[CustomerProfile]:
        profile = self._profiles.get(customer_id)
        if profile is None:
            return None
        return profile.model_copy(deep=True)

    def update_customer_profile(
        self, customer_id: str, updates: dict[str, Any]
    ) -> CustomerProfile:
        """Merge ``updates`` into the profile (creating it if needed) and refresh insights."""
        existing = self._profiles.get(customer_id) or CustomerProfile(id=customer_id)
        data = existing.model_dump()
        data.update(updates)
        data["id"] = customer_id
        data["updated_at"] = utc_now_iso()

        profile = CustomerProfile.model_validate(data)
        profile.insights = self._derive_insights(profile)
        self._profiles[customer_id] = profile
        self._save_profiles()
        logger.debug("Customer profile updated: %s", customer_id)
        return profile.model_copy(deep=True)

    def record_interaction(
        self,
        customer_id: str,
        interaction_type: str,
        context: Optional[dict[str, Any]] = None,
        outcome: Optional[str] = None,
    ) -> CustomerProfile:
        """Append an interaction to the profile and refresh insights."""
        existing = self._profiles.get(customer_id) or CustomerProfile(id=customer_id)
        interactions = [i.model_dump() for i in existing.interactions]
        interactions.append(
            Interaction(type=interaction_type, context=context or {}, outcome=outcome).model_dump()
        )
        return self.update_customer_profile(customer_id, {"interactions": interactions})

    def _derive_insights(self, profile: CustomerProfile) -> CustomerInsights:
        insights = profile.insights.model_copy()
        prefs = profile.preferences

        if prefs.price_sensitivity == "high":
            insights.persona = "budget_conscious"
        elif prefs.brand_loyalty:
            insights.persona = "brand_loyalist"
        elif prefs.tech_savviness == "advanced":
            insights.persona = "early_adopter"
        else:
            insights.persona = "feature_seeker"

        cutoff = datetime.now(timezone.utc) - INTERACTION_WINDOW
        recent = [i for i in profile.interactions if _parse_timestamp(i.timestamp) > cutoff]
        chats = sum(1 for i in recent if i.type == "chat")
        comparisons = sum(1 for i in recent if i.type == "comparison")

        insights.likelihood_to_purchase = min(
            MAX_PURCHASE_LIKELIHOOD,
            BASE_PURCHASE_LIKELIHOOD
            + chats * CHAT_LIKELIHOOD_WEIGHT
            + comparisons * COMPARISON_LIKELIHOOD_WEIGHT,
        )
        return insights

    # ------------------------------------------------------------------ #
    # Conversation memory
    # ------------------------------------------------------------------ #

    def get_conversation_memory(self, session_id: str) -> ConversationMemory:
        return self._get_or_create_memory(session_id).model_copy(deep=True)

    def update_conversation_memory(self, session_id: str, updates: dict[str, Any]) -> None:
        memory = self._get_or_create_memory(session_id)
        data = memory.model_dump()
        data.update(updates)
        data["session_id"] = session_id
        self._memories[session_id] = ConversationMemory.model_validate(data)
        self._save_memories()

    def _get_or_create_memory(self, session_id: str) -> ConversationMemory:
        memory = self._memories.get(session_id)
        if memory is None:
            memory = ConversationMemory(session_id=session_id)
            self._memories[session_id] = memory
        return memory

    def add_to_short_term_memory(
        self, session_id: str, key: str, value: Any, importance: int = 5
    ) -> None:
        """Record an entry, keeping only the highest-importance entries."""
        memory = self._get_or_create_memory(session_id)
        memory.short_term_memory.append(
            MemoryEntry(key=key, value=value, importance=importance)
        )
        memory.short_term_memory = sorted(
            memory.short_term_memory, key=lambda entry: entry.importance, reverse=True
        )[: self._short_term_limit]
        self._save_memories()

    def promote_to_long_term_memory(
        self, session_id: str, pattern: str, context: dict[str, Any]
    ) -> None:
        memory = self._get_or_create_memory(session_id)
        for existing in memory.long_term_memory:
            if existing.pattern == pattern:
                existing.frequency += 1
                existing.last_seen = utc_now_iso()
                existing.context = {**existing.context, **context}
                break
        else:
            memory.long_term_memory.append(LongTermPattern(pattern=pattern, context=context))
        self._save_memories()

    def get_relevant_memories(
        self,
        session_id: str,
        query: str,
        limit: int = settings.memory.relevant_memory_limit,
    ) -> list[Any]:
        """Return stored values sharing at least one word with ``query``."""
        memory = self._get_or_create_memory(session_id)
        words = query.lower().split()
        if not words:
            return []

        matches = [
            entry
            for entry in memory.short_term_memory
            if any(word in json.dumps(entry.value, default=str).lower() for word in words)
        ]
        matches.sort(key=lambda entry: entry.importance, reverse=True)
        return [entry.value for entry in matches[:limit]]

    # ------------------------------------------------------------------ #
    # Key-value mirror
    # ------------------------------------------------------------------ #

    def _load_from_storage(self) -> None:
        if self._kv_store is None:
            return
        try:
            profiles = self._kv_store.get(PROFILES_KEY) or {}
            self._profiles = {
                cid: CustomerProfile.model_validate(raw) for cid, raw in profiles.items()
            }
            memories = self._kv_store.get(MEMORIES_KEY) or {}
            self._memories = {
                sid: ConversationMemory.model_validate(raw) for sid, raw in memories.items()
            }
            logger.info(
                "Loaded %d profiles and %d conversation memories from storage",
                len(self._profiles), len(self._memories),
            )
        except _MIRROR_ERRORS as exc:
            logger.warning("Failed to load memory from storage: %s", exc)

    def _save_profiles(self) -> None:
        if self._kv_store is None:
            return
        try:
            self._kv_store.set(
                PROFILES_KEY, {cid: p.model_dump() for cid, p in self._profiles.items()}
            )
        except _MIRROR_ERRORS as exc:
            logger.warning("Failed to save customer profiles: %s", exc)

    def _save_memories(self) -> None:
        if self._kv_store is None:
            return
        try:
            self._kv_store.set(
                MEMORIES_KEY, {sid: m.model_dump() for sid, m in self._memories.items()}
            )
        except _MIRROR_ERRORS as exc:
            logger.warning("Failed to save conversation memory: %s", exc)


def build_memory_store() -> MemoryStore:
    """Mirror into SQLite when MEMORY_STORE_PATH is set, else keep memory in process."""
    if settings.memory.store_path:
        return MemoryStore(SQLiteKeyValueStore(settings.memory.store_path))
    return MemoryStore()


def _parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
