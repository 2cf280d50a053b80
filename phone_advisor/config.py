"""
Centralized configuration with environment variable overrides.

Decision thresholds, planning limits, memory sizing, and the product
catalog endpoint are all configurable here. Engine, planner, and tool
logic read their tunables from ``settings``.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class DecisionConfig:
    """Confidence thresholds and multipliers for action selection."""

    direct_response_threshold: float = _safe_float("DIRECT_RESPONSE_THRESHOLD", "0.8")
    workflow_threshold: float = _safe_float("WORKFLOW_THRESHOLD", "0.6")
    tool_threshold: float = _safe_float("TOOL_THRESHOLD", "0.5")
    clarify_threshold: float = _safe_float("CLARIFY_THRESHOLD", "0.5")
    workflow_confidence_scale: float = _safe_float("WORKFLOW_CONFIDENCE_SCALE", "0.9")
    tool_confidence_scale: float = _safe_float("TOOL_CONFIDENCE_SCALE", "0.8")
    fallback_confidence_scale: float = _safe_float("FALLBACK_CONFIDENCE_SCALE", "0.6")
    clarify_confidence: float = _safe_float("CLARIFY_CONFIDENCE", "0.7")
    error_confidence: float = _safe_float("ERROR_CONFIDENCE", "0.3")
    purchase_likelihood_boost_threshold: float = _safe_float(
        "PURCHASE_LIKELIHOOD_BOOST_THRESHOLD", "0.7"
    )
    max_follow_up_questions: int = _safe_int("MAX_FOLLOW_UP_QUESTIONS", "3")


@dataclass(frozen=True)
class PlanningConfig:
    """Workflow planning and execution limits."""

    max_tasks: int = _safe_int("PLANNING_MAX_TASKS", "5")
    max_duration_minutes: int = _safe_int("PLANNING_MAX_DURATION", "10")
    max_waves: int = _safe_int("WORKFLOW_MAX_WAVES", "10")
    retry_backoff_seconds: float = _safe_float("RETRY_BACKOFF_SECONDS", "0.5")


@dataclass(frozen=True)
class MemoryConfig:
    """Conversation memory sizing and optional persistence."""

    short_term_limit: int = _safe_int("SHORT_TERM_MEMORY_LIMIT", "20")
    decision_importance: int = _safe_int("DECISION_MEMORY_IMPORTANCE", "8")
    relevant_memory_limit: int = _safe_int("RELEVANT_MEMORY_LIMIT", "5")
    store_path: Optional[str] = os.getenv("MEMORY_STORE_PATH") or None


@dataclass(frozen=True)
class CatalogConfig:
    """Product datastore endpoint and recommendation sizing."""

    search_url: Optional[str] = os.getenv("CATALOG_SEARCH_URL") or None
    timeout_sec: int = _safe_int("CATALOG_TIMEOUT", "10")
    auth_token: Optional[str] = os.getenv("CATALOG_AUTH_TOKEN") or None
    recommendation_pool_size: int = _safe_int("RECOMMENDATION_POOL_SIZE", "50")
    recommendation_top_k: int = _safe_int("RECOMMENDATION_TOP_K", "5")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    decision: DecisionConfig = field(default_factory=DecisionConfig)
    planning: PlanningConfig = field(default_factory=PlanningConfig)
    memory: MemoryConfig = field(default_factory=MemoryConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    agent_name: str = os.getenv("AGENT_NAME", "phone-advisor")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    for name, value in [
        ("DIRECT_RESPONSE_THRESHOLD", config.decision.direct_response_threshold),
        ("WORKFLOW_THRESHOLD", config.decision.workflow_threshold),
        ("TOOL_THRESHOLD", config.decision.tool_threshold),
        ("CLARIFY_THRESHOLD", config.decision.clarify_threshold),
        ("WORKFLOW_CONFIDENCE_SCALE", config.decision.workflow_confidence_scale),
        ("TOOL_CONFIDENCE_SCALE", config.decision.tool_confidence_scale),
        ("FALLBACK_CONFIDENCE_SCALE", config.decision.fallback_confidence_scale),
        ("CLARIFY_CONFIDENCE", config.decision.clarify_confidence),
        ("ERROR_CONFIDENCE", config.decision.error_confidence),
        ("PURCHASE_LIKELIHOOD_BOOST_THRESHOLD",
         config.decision.purchase_likelihood_boost_threshold),
    ]:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"{name} must be between 0.0 and 1.0, got {value}")

    if config.decision.max_follow_up_questions < 1:
        raise ValueError(
            "MAX_FOLLOW_UP_QUESTIONS must be >= 1, "
            f"got {config.decision.max_follow_up_questions}"
        )
    if config.planning.max_tasks < 1:
        raise ValueError(
            f"PLANNING_MAX_TASKS must be >= 1, got {config.planning.max_tasks}"
        )
    if config.planning.max_duration_minutes < 1:
        raise ValueError(
            f"PLANNING_MAX_DURATION must be >= 1, got {config.planning.max_duration_minutes}"
        )
    if config.planning.max_waves < 1:
        raise ValueError(
            f"WORKFLOW_MAX_WAVES must be >= 1, got {config.planning.max_waves}"
        )
    if config.planning.retry_backoff_seconds < 0:
        raise ValueError(
            "RETRY_BACKOFF_SECONDS must be >= 0, "
            f"got {config.planning.retry_backoff_seconds}"
        )
    if config.memory.short_term_limit < 1:
        raise ValueError(
            f"SHORT_TERM_MEMORY_LIMIT must be >= 1, got {config.memory.short_term_limit}"
        )
    if not 1 <= config.memory.decision_importance <= 10:
        raise ValueError(
            "DECISION_MEMORY_IMPORTANCE must be between 1 and 10, "
            f"got {config.memory.decision_importance}"
        )
    if config.catalog.timeout_sec < 1:
        raise ValueError(
            f"CATALOG_TIMEOUT must be >= 1, got {config.catalog.timeout_sec}"
        )
    if config.catalog.recommendation_top_k < 1:
        raise ValueError(
            f"RECOMMENDATION_TOP_K must be >= 1, got {config.catalog.recommendation_top_k}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.agent_name)
    return config


# Singleton instance
settings = load_config()
