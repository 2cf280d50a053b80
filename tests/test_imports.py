"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_workflow_schema(self):
        from phone_advisor.schemas.workflow_schema import TaskStatus, WorkflowStatus
        assert TaskStatus.IN_PROGRESS == "in_progress"
        assert WorkflowStatus.PAUSED == "paused"

    def test_import_decision_schema(self):
        from phone_advisor.schemas.decision_schema import AgentState, DecisionAction
        state = AgentState(session_id="s1")
        assert state.performance_metrics.accuracy == 0.8
        assert DecisionAction.CLARIFY == "clarify"

    def test_import_customer_schema(self):
        from phone_advisor.schemas.customer_schema import CustomerProfile
        profile = CustomerProfile(id="c1")
        assert profile.insights.persona == "feature_seeker"


class TestPackageReExports:
    def test_conversation_package(self):
        from phone_advisor.conversation import IntentClassifier, MemoryStore, SQLiteKeyValueStore
        assert IntentClassifier is not None
        assert MemoryStore is not None
        assert SQLiteKeyValueStore is not None

    def test_tools_package(self):
        from phone_advisor.tools import InMemoryProductCatalog, ToolRegistry, ToolResult
        assert ToolResult(success=True).metadata == {}
        assert InMemoryProductCatalog is not None
        assert ToolRegistry is not None

    def test_workflow_package(self):
        from phone_advisor.workflow import InvalidTransitionError, TaskPlanner, WorkflowExecutor
        assert issubclass(InvalidTransitionError, Exception)
        assert TaskPlanner is not None
        assert WorkflowExecutor is not None

    def test_agent_package(self):
        from phone_advisor.agent import DecisionEngine
        assert DecisionEngine is not None


class TestConsoleDemo:
    def test_scenarios_defined(self):
        import console_demo
        assert set(console_demo.ConsoleSession.SCENARIOS) == {"recommendation", "price", "greeting"}
