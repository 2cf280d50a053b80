"""Decision inputs, outputs, and per-session agent state."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from phone_advisor.utils import utc_now_iso


class DecisionAction(str, Enum):
    DIRECT_RESPONSE = "direct_response"
    EXECUTE_WORKFLOW = "execute_workflow"
    USE_TOOL = "use_tool"
    GATHER_INFO = "gather_info"
    CLARIFY = "clarify"


class AgentMode(str, Enum):
    LISTENING = "listening"
    THINKING = "thinking"
    PLANNING = "planning"
    EXECUTING = "executing"
    RESPONDING = "responding"


class ConversationTurn(BaseModel):
    """A single prior message in the conversation."""

    role: str  # "user" or "assistant"
    content: str
    timestamp: str = Field(default_factory=utc_now_iso)


class DecisionContext(BaseModel):
    """Input to one decision call."""

    model_config = {"frozen": True}

    session_id: str
    customer_id: Optional[str] = None
    user_input: str
    current_intent: Optional[str] = None
    conversation_history: list[ConversationTurn] = Field(default_factory=list)
    environment_context: dict[str, Any] = Field(default_factory=dict)


class DecisionResult(BaseModel):
    """The engine's chosen action and its payload."""

    action: DecisionAction
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str
    response: Optional[str] = None
    workflow_id: Optional[str] = None
    tool_name: Optional[str] = None
    tool_parameters: Optional[dict[str, Any]] = None
    follow_up_questions: Optional[list[str]] = None
    recommended_actions: Optional[list[str]] = None


class IntentAnalysis(BaseModel):
    """Classifier output for one user utterance."""

    primary_intent: str = "general_inquiry"
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    sub_intents: list[str] = Field(default_factory=list)
    emotional_context: str = "neutral"
    urgency: str = "low"  # "low" | "medium" | "high"


@dataclass
class ContextualAwareness:
    """What the agent currently believes about the shopper."""

    purchase_intent: str = "browsing"
    conversation_stage: str = "greeting"
    customer_persona: Optional[str] = None
    emotional_state: Optional[str] = None


@dataclass
class PerformanceMetrics:
    """Rolling per-session decision metrics."""

    response_time_ms: float = 0.0
    accuracy: float = 0.8
    customer_satisfaction: float = 0.8


@dataclass
class AgentState:
    """
    Per-session agent state.

    Created lazily on the first decision or workflow call for a session
    and mutated only by the DecisionEngine.
    """

    session_id: str
    current_mode: AgentMode = AgentMode.LISTENING
    active_workflows: list[str] = field(default_factory=list)
    contextual_awareness: ContextualAwareness = field(default_factory=ContextualAwareness)
    performance_metrics: PerformanceMetrics = field(default_factory=PerformanceMetrics)
