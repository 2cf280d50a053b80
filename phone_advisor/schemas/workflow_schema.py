"""Task, workflow, and planning data models."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from phone_advisor.utils import utc_now_iso


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class WorkflowStatus(str, Enum):
    CREATED = "created"
    PLANNING = "planning"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"
    PAUSED = "paused"


TERMINAL_TASK_STATUSES = frozenset(
    {TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.CANCELLED}
)
TERMINAL_WORKFLOW_STATUSES = frozenset({WorkflowStatus.COMPLETED, WorkflowStatus.FAILED})


class Task(BaseModel):
    """A single tool invocation inside a workflow."""

    id: str
    type: str
    description: str
    priority: int = Field(ge=1, le=10)
    dependencies: list[str] = Field(default_factory=list)
    status: TaskStatus = TaskStatus.PENDING

    tool: str
    parameters: dict[str, Any] = Field(default_factory=dict)
    retry_count: int = 0
    max_retries: int = 2

    estimated_duration: int = 1  # minutes
    created_at: str = Field(default_factory=utc_now_iso)
    started_at: Optional[str] = None
    completed_at: Optional[str] = None

    result: Any = None
    error: Optional[str] = None


class Workflow(BaseModel):
    """A planned set of dependent tasks serving one user goal."""

    id: str
    name: str
    description: str
    customer_id: Optional[str] = None
    session_id: str

    status: WorkflowStatus = WorkflowStatus.PLANNING
    current_step: int = 0
    total_steps: int = 0

    tasks: list[Task] = Field(default_factory=list)
    task_dependency_graph: dict[str, list[str]] = Field(default_factory=dict)

    context: dict[str, Any] = Field(default_factory=dict)
    goal: str
    success_criteria: list[str] = Field(default_factory=list)

    created_at: str = Field(default_factory=utc_now_iso)
    started_at: Optional[str] = None
    completed_at: Optional[str] = None

    def get_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def is_terminal(self) -> bool:
        return self.status in TERMINAL_WORKFLOW_STATUSES


class PlanningConstraints(BaseModel):
    """Resource limits a planned workflow must respect."""

    max_tasks: int = Field(default=5, ge=1)
    max_duration: int = Field(default=10, ge=1)  # minutes
    budget: Optional[float] = None


class PlanningContext(BaseModel):
    """Everything the planner needs to turn an intent into a workflow."""

    user_intent: str
    current_context: dict[str, Any] = Field(default_factory=dict)
    customer_profile: Optional[dict[str, Any]] = None
    available_tools: list[str] = Field(default_factory=list)
    constraints: PlanningConstraints = Field(default_factory=PlanningConstraints)


class WorkflowRunResult(BaseModel):
    """Outcome of an execute/run call on a workflow."""

    success: bool
    result: Optional[Workflow] = None
    error: Optional[str] = None
    waves: int = 0
