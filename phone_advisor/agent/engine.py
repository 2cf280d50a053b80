"""
Decision engine: the entry point for every shopper utterance.

For each input the engine resolves the customer's profile and session
memory, classifies intent, and picks one action:

    direct_response   canned answer for simple, high-confidence intents
    execute_workflow  multi-step plan for recommendations and comparisons
    use_tool          single tool call for price and product questions
    clarify           follow-up questions when the intent is unclear

Workflows are planned during the decision and executed on request, one
wave per ``execute_workflow`` call or to completion via ``run_workflow``.
The engine owns one MemoryStore, ToolRegistry, and TaskPlanner; pass your
own to isolate state.
"""

import copy
import random
import time
from typing import Optional

from phone_advisor.config import settings
from phone_advisor.conversation.intent_classifier import IntentClassifier
from phone_advisor.conversation.memory import MemoryStore, build_memory_store
from phone_advisor.logging_context import get_session_logger, set_session_id
from phone_advisor.prompts.responses import (
    CLARIFICATION_RESPONSE,
    ERROR_RESPONSE,
    build_clarifying_questions,
    build_direct_response,
)
from phone_advisor.schemas.customer_schema import CustomerProfile
from phone_advisor.schemas.decision_schema import (
    AgentMode,
    AgentState,
    DecisionAction,
    DecisionContext,
    DecisionResult,
    IntentAnalysis,
)
from phone_advisor.schemas.workflow_schema import (
    PlanningConstraints,
    PlanningContext,
    Workflow,
    WorkflowRunResult,
)
from phone_advisor.tools.registry import ToolRegistry
from phone_advisor.workflow.executor import WorkflowExecutor
from phone_advisor.workflow.planner import TaskPlanner

logger = get_session_logger(__name__)

DIRECT_INTENTS = frozenset({"greeting", "simple_inquiry"})
WORKFLOW_INTENTS = frozenset({"recommendation", "comparison"})
TOOL_FOR_INTENT = {
    "price_inquiry": "price_comparison",
    "product_inquiry": "phone_database_search",
}

CONVERSATION_STAGE_FOR_INTENT = {
    "greeting": "greeting",
    "recommendation": "recommendation",
    "comparison": "comparison",
    "purchase_intent": "closing",
}
PURCHASE_INTENT_FOR_INTENT = {
    "purchase_intent": "ready_to_buy",
    "comparison": "comparing",
    "recommendation": "researching",
    "product_inquiry": "researching",
    "price_inquiry": "researching",
}


class DecisionEngine:
    """Chooses an action per utterance and drives planned workflows."""

    def __init__(
        self,
        memory: Optional[MemoryStore] = None,
        tools: Optional[ToolRegistry] = None,
        planner: Optional[TaskPlanner] = None,
        classifier: Optional[IntentClassifier] = None,
        executor: Optional[WorkflowExecutor] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.memory = memory or build_memory_store()
        self.tools = tools or ToolRegistry.with_default_tools(self.memory, rng=rng)
        self.planner = planner or TaskPlanner()
        self.classifier = classifier or IntentClassifier()
        self.executor = executor or WorkflowExecutor(self.planner, self.tools)
        self._rng = rng or random.Random()
        self._agent_states: dict[str, AgentState] = {}

    # ------------------------------------------------------------------ #
    # Decisions
    # ------------------------------------------------------------------ #

    async def make_decision(self, context: DecisionContext) -> DecisionResult:
        """Decide how to answer one utterance. Never raises."""
        set_session_id(context.session_id)
        start = time.perf_counter()
        self._set_mode(context.session_id, AgentMode.THINKING)

        try:
            profile = (
                self.memory.get_customer_profile(context.customer_id)
                if context.customer_id
                else None
            )
            memory = self.memory.get_conversation_memory(context.session_id)
            relevant = self.memory.get_relevant_memories(context.session_id, context.user_input)
            logger.debug("Found %d relevant memories", len(relevant))

            analysis = self.classifier.classify(context.user_input, profile, memory)
            decision = self._select_action(context, analysis, profile)

            elapsed_ms = (time.perf_counter() - start) * 1000
            self._update_performance_metrics(context.session_id, elapsed_ms, decision.confidence)
            self._update_contextual_awareness(context.session_id, analysis, profile)
            self._store_decision_context(context, decision)

            logger.info(
                "Decision: %s (%.2f) for intent %s",
                decision.action.value, decision.confidence, analysis.primary_intent,
            )
            return decision

        except Exception:
            logger.exception("Decision engine error")
            return DecisionResult(
                action=DecisionAction.DIRECT_RESPONSE,
                confidence=settings.decision.error_confidence,
                reasoning="Fallback response due to decision engine error",
                response=ERROR_RESPONSE,
            )
        finally:
            self._set_mode(context.session_id, AgentMode.LISTENING)

    def _select_action(
        self,
        context: DecisionContext,
        analysis: IntentAnalysis,
        profile: Optional[CustomerProfile],
    ) -> DecisionResult:
        cfg = settings.decision
        intent = analysis.primary_intent
        confidence = analysis.confidence

        if confidence > cfg.direct_response_threshold and intent in DIRECT_INTENTS:
            return DecisionResult(
                action=DecisionAction.DIRECT_RESPONSE,
                confidence=confidence,
                reasoning="High-confidence simple intent detected",
                response=self._direct_response(analysis, profile),
            )

        if intent in WORKFLOW_INTENTS and confidence > cfg.workflow_threshold:
            self._set_mode(context.session_id, AgentMode.PLANNING)
            workflow = self.planner.plan_workflow(self._planning_context(context, profile))
            self._get_or_create_state(context.session_id).active_workflows.append(workflow.id)
            return DecisionResult(
                action=DecisionAction.EXECUTE_WORKFLOW,
                confidence=confidence * cfg.workflow_confidence_scale,
                reasoning=f"Complex {intent} request requires multi-step workflow",
                workflow_id=workflow.id,
            )

        if intent in TOOL_FOR_INTENT and confidence > cfg.tool_threshold:
            return DecisionResult(
                action=DecisionAction.USE_TOOL,
                confidence=confidence * cfg.tool_confidence_scale,
                reasoning=f"Single tool execution appropriate for {intent}",
                tool_name=TOOL_FOR_INTENT[intent],
                tool_parameters={
                    "query": context.user_input,
                    "customer_context": profile.preferences.model_dump() if profile else {},
                },
            )

        if confidence < cfg.clarify_threshold:
            return DecisionResult(
                action=DecisionAction.CLARIFY,
                confidence=cfg.clarify_confidence,
                reasoning="Intent unclear, need clarification",
                follow_up_questions=build_clarifying_questions(
                    context.user_input, cfg.max_follow_up_questions
                ),
                response=CLARIFICATION_RESPONSE,
            )

        return DecisionResult(
            action=DecisionAction.DIRECT_RESPONSE,
            confidence=confidence * cfg.fallback_confidence_scale,
            reasoning="Fallback to direct response",
            response=self._direct_response(analysis, profile),
        )

    def _planning_context(
        self, context: DecisionContext, profile: Optional[CustomerProfile]
    ) -> PlanningContext:
        return PlanningContext(
            user_intent=context.user_input,
            current_context={
                "session_id": context.session_id,
                "customer_id": context.customer_id,
                "phone_query": context.user_input,
            },
            customer_profile=(
                {
                    "preferences": profile.preferences.model_dump(),
                    "insights": profile.insights.model_dump(),
                }
                if profile
                else None
            ),
            available_tools=self.tools.get_tool_names(),
            constraints=PlanningConstraints(
                max_tasks=settings.planning.max_tasks,
                max_duration=settings.planning.max_duration_minutes,
            ),
        )

    def _direct_response(
        self, analysis: IntentAnalysis, profile: Optional[CustomerProfile]
    ) -> str:
        return build_direct_response(
            analysis.primary_intent,
            analysis.emotional_context,
            customer_name=profile.first_name if profile else None,
            rng=self._rng,
        )

    def _store_decision_context(self, context: DecisionContext, decision: DecisionResult) -> None:
        self.memory.add_to_short_term_memory(
            context.session_id,
            "decision_context",
            {
                "input": context.user_input,
                "decision": decision.action.value,
                "confidence": decision.confidence,
                "reasoning": decision.reasoning,
            },
            importance=settings.memory.decision_importance,
        )

    # ------------------------------------------------------------------ #
    # Workflows
    # ------------------------------------------------------------------ #

    async def execute_workflow(self, workflow_id: str) -> WorkflowRunResult:
        """Run one wave of ready tasks. Call again to advance further."""
        return await self._drive_workflow(workflow_id, run_all=False)

    async def run_workflow(
        self, workflow_id: str, max_waves: Optional[int] = None
    ) -> WorkflowRunResult:
        """Run waves, with retries, until the workflow settles."""
        return await self._drive_workflow(workflow_id, run_all=True, max_waves=max_waves)

    async def _drive_workflow(
        self, workflow_id: str, run_all: bool, max_waves: Optional[int] = None
    ) -> WorkflowRunResult:
        workflow = self.planner.get_workflow(workflow_id)
        if workflow is None:
            logger.warning("Workflow not found: %s", workflow_id)
            return WorkflowRunResult(success=False, error=f"Workflow {workflow_id} not found")

        session_id = workflow.session_id
        set_session_id(session_id)
        self._set_mode(session_id, AgentMode.EXECUTING)
        try:
            if run_all:
                result = await self.executor.run_to_completion(workflow_id, max_waves=max_waves)
            else:
                result = await self.executor.run_wave(workflow_id)
        except Exception as exc:
            logger.exception("Workflow execution failed: %s", workflow_id)
            return WorkflowRunResult(success=False, error=str(exc) or "Workflow execution failed")
        finally:
            self._set_mode(session_id, AgentMode.LISTENING)

        if result.result is not None and result.result.is_terminal():
            self._remove_active_workflow(workflow_id)
        return result

    async def get_active_workflows(self, session_id: str) -> list[Workflow]:
        state = self._agent_states.get(session_id)
        if state is None:
            return []
        workflows = []
        for workflow_id in state.active_workflows:
            workflow = self.planner.get_workflow(workflow_id)
            if workflow is not None:
                workflows.append(workflow)
        return workflows

    async def cancel_workflow(self, workflow_id: str) -> None:
        self.planner.cancel_workflow(workflow_id)
        self._remove_active_workflow(workflow_id)

    def _remove_active_workflow(self, workflow_id: str) -> None:
        for state in self._agent_states.values():
            if workflow_id in state.active_workflows:
                state.active_workflows.remove(workflow_id)

    # ------------------------------------------------------------------ #
    # Agent state
    # ------------------------------------------------------------------ #

    async def get_agent_state(self, session_id: str) -> Optional[AgentState]:
        """Snapshot of the session's state, or None if never seen."""
        state = self._agent_states.get(session_id)
        return copy.deepcopy(state) if state else None

    def _get_or_create_state(self, session_id: str) -> AgentState:
        state = self._agent_states.get(session_id)
        if state is None:
            state = AgentState(session_id=session_id)
            self._agent_states[session_id] = state
        return state

    def _set_mode(self, session_id: str, mode: AgentMode) -> None:
        self._get_or_create_state(session_id).current_mode = mode

    def _update_performance_metrics(
        self, session_id: str, response_time_ms: float, confidence: float
    ) -> None:
        metrics = self._get_or_create_state(session_id).performance_metrics
        metrics.response_time_ms = response_time_ms
        metrics.accuracy = (metrics.accuracy + confidence) / 2

    def _update_contextual_awareness(
        self,
        session_id: str,
        analysis: IntentAnalysis,
        profile: Optional[CustomerProfile],
    ) -> None:
        awareness = self._get_or_create_state(session_id).contextual_awareness
        intent = analysis.primary_intent

        awareness.emotional_state = analysis.emotional_context
        awareness.conversation_stage = CONVERSATION_STAGE_FOR_INTENT.get(intent, "discovery")
        awareness.purchase_intent = PURCHASE_INTENT_FOR_INTENT.get(
            intent, awareness.purchase_intent
        )
        if profile is not None:
            awareness.customer_persona = profile.insights.persona
