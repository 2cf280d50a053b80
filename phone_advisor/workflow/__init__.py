from phone_advisor.workflow.executor import WorkflowExecutor
from phone_advisor.workflow.planner import TaskPlanner
from phone_advisor.workflow.task_lifecycle import InvalidTransitionError

__all__ = ["InvalidTransitionError", "TaskPlanner", "WorkflowExecutor"]
