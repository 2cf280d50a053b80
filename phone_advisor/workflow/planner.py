"""
Multi-step task planner.

Turns a user's intent text into a Workflow: a small DAG of tasks, each
bound to a registered tool. Plans come from fixed templates selected by
keyword, in priority order, and are cut down to the caller's task budget.

The planner is the only owner of workflow records. Reads return deep
copies; every change goes through update_task_status, reset_task_for_retry,
or cancel_workflow so the workflow status is always recomputed.

Usage:
    planner = TaskPlanner()
    workflow = planner.plan_workflow(PlanningContext(user_intent="recommend a phone"))
    ready = planner.get_next_executable_tasks(workflow.id)
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional

from phone_advisor.schemas.workflow_schema import (
    TERMINAL_TASK_STATUSES,
    PlanningContext,
    Task,
    TaskStatus,
    Workflow,
    WorkflowStatus,
)
from phone_advisor.utils import new_id, title_words, utc_now_iso
from phone_advisor.workflow.task_lifecycle import validate_transition

logger = logging.getLogger(__name__)


ParameterBuilder = Callable[[PlanningContext], dict[str, Any]]


def _no_parameters(context: PlanningContext) -> dict[str, Any]:
    # Filled from upstream results by the tool itself, if at all.
    return {}


@dataclass(frozen=True)
class TaskTemplate:
    """Blueprint for one task; ``depends_on`` holds 0-based template positions."""

    type: str
    description: str
    priority: int
    tool: str
    depends_on: tuple[int, ...] = ()
    max_retries: int = 2
    estimated_duration: int = 1
    build_parameters: ParameterBuilder = _no_parameters


WORKFLOW_TEMPLATES: dict[str, list[TaskTemplate]] = {
    "recommendation": [
        TaskTemplate(
            type="data_gathering",
            description="Gather customer preferences and requirements",
            priority=9,
            tool="customer_profile_analysis",
            estimated_duration=1,
            build_parameters=lambda ctx: {
                "customer_id": ctx.current_context.get("customer_id"),
                "session_context": dict(ctx.current_context),
            },
        ),
        TaskTemplate(
            type="database_search",
            description="Search phone database based on requirements",
            priority=8,
            tool="phone_database_search",
            depends_on=(0,),
            max_retries=3,
            estimated_duration=2,
        ),
        TaskTemplate(
            type="recommendation",
            description="Generate personalized recommendations",
            priority=9,
            tool="generate_recommendations",
            depends_on=(0, 1),
            estimated_duration=3,
        ),
        TaskTemplate(
            type="enhancement",
            description="Add review analysis and pricing info",
            priority=6,
            tool="review_analysis",
            depends_on=(2,),
            estimated_duration=2,
        ),
    ],
    "price_comparison": [
        TaskTemplate(
            type="phone_identification",
            description="Identify phones to compare prices for",
            priority=8,
            tool="phone_database_search",
            estimated_duration=2,
            build_parameters=lambda ctx: {
                "query": ctx.current_context.get("phone_query") or "latest phones",
            },
        ),
        TaskTemplate(
            type="price_comparison",
            description="Compare prices across retailers",
            priority=9,
            tool="price_comparison",
            depends_on=(0,),
            max_retries=3,
            estimated_duration=3,
        ),
    ],
    "analysis": [
        TaskTemplate(
            type="phone_identification",
            description="Identify phone to analyze",
            priority=8,
            tool="phone_database_search",
            estimated_duration=1,
            build_parameters=lambda ctx: {"query": ctx.current_context.get("phone_query")},
        ),
        TaskTemplate(
            type="review_analysis",
            description="Analyze customer reviews and sentiment",
            priority=7,
            tool="review_analysis",
            depends_on=(0,),
            estimated_duration=4,
            build_parameters=lambda ctx: {"sentiment_analysis": True},
        ),
        TaskTemplate(
            type="price_analysis",
            description="Analyze pricing and value proposition",
            priority=6,
            tool="price_comparison",
            depends_on=(0,),
            estimated_duration=2,
        ),
    ],
    "purchase_journey": [
        TaskTemplate(
            type="final_recommendation",
            description="Confirm final phone choice",
            priority=9,
            tool="generate_recommendations",
            estimated_duration=2,
            build_parameters=lambda ctx: {
                "customer_profile": ctx.customer_profile,
                "final_selection": True,
            },
        ),
        TaskTemplate(
            type="retailer_search",
            description="Find best purchase options",
            priority=8,
            tool="price_comparison",
            depends_on=(0,),
            max_retries=3,
            estimated_duration=3,
        ),
        TaskTemplate(
            type="purchase_assistance",
            description="Provide purchase guidance and next steps",
            priority=7,
            tool="send_notification",
            depends_on=(1,),
            estimated_duration=1,
            build_parameters=lambda ctx: {"type": "purchase_guidance"},
        ),
    ],
    "upgrade_path": [
        TaskTemplate(
            type="current_phone_analysis",
            description="Analyze current phone capabilities",
            priority=8,
            tool="phone_database_search",
            estimated_duration=2,
            build_parameters=lambda ctx: {
                "query": ctx.current_context.get("current_phone") or "analyze upgrade",
            },
        ),
        TaskTemplate(
            type="upgrade_recommendations",
            description="Generate upgrade recommendations",
            priority=9,
            tool="generate_recommendations",
            depends_on=(0,),
            estimated_duration=3,
            build_parameters=lambda ctx: {"upgrade_analysis": True},
        ),
    ],
    "information_gathering": [
        TaskTemplate(
            type="general_search",
            description="Search for relevant phone information",
            priority=7,
            tool="phone_database_search",
            estimated_duration=2,
            build_parameters=lambda ctx: {"query": ctx.user_intent},
        ),
    ],
}

# Checked in order; the first template with a matching keyword wins.
TEMPLATE_TRIGGERS: list[tuple[str, tuple[str, ...]]] = [
    ("recommendation", ("recommend", "suggest", "find phone")),
    ("price_comparison", ("price", "compare cost")),
    ("analysis", ("analyze", "review", "pros and cons")),
    ("purchase_journey", ("buy", "purchase", "order")),
    ("upgrade_path", ("upgrade", "switch", "new phone")),
]
DEFAULT_TEMPLATE = "information_gathering"

SUCCESS_CRITERIA: list[tuple[str, str]] = [
    ("recommend", "Personalized recommendations provided"),
    ("compare", "Comprehensive comparison completed"),
    ("analyze", "Detailed analysis delivered"),
    ("price", "Pricing information gathered"),
]


def select_template(intent_text: str) -> str:
    """Return the template key for an intent string."""
    lowered = intent_text.lower()
    for key, keywords in TEMPLATE_TRIGGERS:
        if any(keyword in lowered for keyword in keywords):
            return key
    return DEFAULT_TEMPLATE


def find_dangling_dependencies(tasks: list[Task]) -> dict[str, list[str]]:
    """Map task id -> dependency ids that do not exist in ``tasks``."""
    known = {task.id for task in tasks}
    dangling: dict[str, list[str]] = {}
    for task in tasks:
        missing = [dep for dep in task.dependencies if dep not in known]
        if missing:
            dangling[task.id] = missing
    return dangling


def build_dependency_graph(tasks: list[Task]) -> dict[str, list[str]]:
    return {task.id: list(task.dependencies) for task in tasks}


class TaskPlanner:
    """Plans workflows and owns their task state."""

    def __init__(self) -> None:
        self._workflows: dict[str, Workflow] = {}

    # ------------------------------------------------------------------ #
    # Planning
    # ------------------------------------------------------------------ #

    def plan_workflow(self, context: PlanningContext) -> Workflow:
        """Create, register, and return a new workflow for ``context``."""
        workflow = Workflow(
            id=new_id("workflow"),
            name=self.generate_workflow_name(context.user_intent),
            description=context.user_intent,
            session_id=context.current_context.get("session_id") or "unknown",
            customer_id=context.current_context.get("customer_id"),
            status=WorkflowStatus.PLANNING,
            context=dict(context.current_context),
            goal=context.user_intent,
            success_criteria=self.generate_success_criteria(context.user_intent),
        )

        tasks = self.generate_task_plan(context)
        workflow.tasks = tasks
        workflow.total_steps = len(tasks)
        workflow.task_dependency_graph = build_dependency_graph(tasks)
        workflow.status = WorkflowStatus.CREATED

        self._workflows[workflow.id] = workflow
        logger.info(
            "Workflow planned: %s (%s) with %d tasks",
            workflow.id, workflow.name, len(tasks),
        )
        return workflow.model_copy(deep=True)

    def generate_task_plan(self, context: PlanningContext) -> list[Task]:
        """Instantiate the matching template, truncated to ``max_tasks``."""
        template_key = select_template(context.user_intent)
        templates = WORKFLOW_TEMPLATES[template_key]

        batch = uuid.uuid4().hex[:8]
        ids = [f"task_{batch}_{i + 1}" for i in range(len(templates))]

        tasks = []
        for index, template in enumerate(templates):
            if context.available_tools and template.tool not in context.available_tools:
                logger.warning(
                    "Template '%s' binds unavailable tool '%s'", template_key, template.tool
                )
            tasks.append(Task(
                id=ids[index],
                type=template.type,
                description=template.description,
                priority=template.priority,
                dependencies=[ids[dep] for dep in template.depends_on],
                tool=template.tool,
                parameters=template.build_parameters(context),
                max_retries=template.max_retries,
                estimated_duration=template.estimated_duration,
            ))

        kept = tasks[: context.constraints.max_tasks]
        self._prune_dangling_dependencies(kept)
        return kept

    @staticmethod
    def _prune_dangling_dependencies(tasks: list[Task]) -> None:
        dangling = find_dangling_dependencies(tasks)
        for task in tasks:
            missing = dangling.get(task.id)
            if missing:
                logger.warning(
                    "Dropping dependencies %s of task %s: not in truncated plan",
                    missing, task.id,
                )
                task.dependencies = [dep for dep in task.dependencies if dep not in missing]

    @staticmethod
    def generate_workflow_name(intent: str) -> str:
        return f"{title_words(intent, 3)} Workflow"

    @staticmethod
    def generate_success_criteria(intent: str) -> list[str]:
        lowered = intent.lower()
        criteria = ["User query addressed successfully"]
        criteria.extend(text for keyword, text in SUCCESS_CRITERIA if keyword in lowered)
        return criteria

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_workflow(self, workflow_id: str) -> Optional[Workflow]:
        workflow = self._workflows.get(workflow_id)
        return workflow.model_copy(deep=True) if workflow else None

    def get_all_workflows(self) -> list[Workflow]:
        return [w.model_copy(deep=True) for w in self._workflows.values()]

    def get_next_executable_tasks(self, workflow_id: str) -> list[Task]:
        """Pending tasks whose dependencies all exist and are completed, in list order."""
        workflow = self._workflows.get(workflow_id)
        if workflow is None:
            return []
        return [
            task.model_copy(deep=True)
            for task in workflow.tasks
            if task.status == TaskStatus.PENDING and self._dependencies_completed(workflow, task)
        ]

    @staticmethod
    def _dependencies_completed(workflow: Workflow, task: Task) -> bool:
        for dep_id in task.dependencies:
            dep = workflow.get_task(dep_id)
            if dep is None or dep.status != TaskStatus.COMPLETED:
                return False
        return True

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def update_task_status(
        self,
        workflow_id: str,
        task_id: str,
        status: TaskStatus,
        result: Any = None,
        error: Optional[str] = None,
    ) -> None:
        """
        Move a task to ``status`` and recompute the workflow status.

        Unknown workflow or task ids are ignored.

        Raises:
            InvalidTransitionError: If the lifecycle forbids the change.
        """
        workflow = self._workflows.get(workflow_id)
        if workflow is None:
            return
        task = workflow.get_task(task_id)
        if task is None:
            return

        validate_transition(
            task.status, status, deps_completed=self._dependencies_completed(workflow, task)
        )

        task.status = status
        if result is not None:
            task.result = result
        if error:
            task.error = error

        if status == TaskStatus.IN_PROGRESS and not task.started_at:
            task.started_at = utc_now_iso()
        if status in TERMINAL_TASK_STATUSES and not task.completed_at:
            task.completed_at = utc_now_iso()

        logger.debug("Task %s -> %s (workflow %s)", task_id, status.value, workflow_id)
        self._update_workflow_status(workflow)

    def reset_task_for_retry(self, workflow_id: str, task_id: str) -> bool:
        """Return a failed task to pending if it has retries left."""
        workflow = self._workflows.get(workflow_id)
        if workflow is None:
            return False
        task = workflow.get_task(task_id)
        if task is None or task.status != TaskStatus.FAILED:
            return False
        if task.retry_count >= task.max_retries:
            return False

        validate_transition(task.status, TaskStatus.PENDING)
        task.retry_count += 1
        task.status = TaskStatus.PENDING
        task.error = None
        task.completed_at = None
        logger.info(
            "Retrying task %s (%d/%d)", task_id, task.retry_count, task.max_retries
        )
        self._update_workflow_status(workflow)
        return True

    def pause_workflow(self, workflow_id: str) -> None:
        workflow = self._workflows.get(workflow_id)
        if workflow is not None and not workflow.is_terminal():
            workflow.status = WorkflowStatus.PAUSED

    def cancel_workflow(self, workflow_id: str) -> bool:
        """Fail the workflow and cancel every task that has not finished."""
        workflow = self._workflows.get(workflow_id)
        if workflow is None:
            return False

        workflow.status = WorkflowStatus.FAILED
        for task in workflow.tasks:
            if task.status in (TaskStatus.PENDING, TaskStatus.IN_PROGRESS):
                validate_transition(task.status, TaskStatus.CANCELLED)
                task.status = TaskStatus.CANCELLED
                task.completed_at = task.completed_at or utc_now_iso()
        logger.info("Workflow cancelled: %s", workflow_id)
        return True

    @staticmethod
    def _update_workflow_status(workflow: Workflow) -> None:
        tasks = workflow.tasks
        completed = sum(1 for t in tasks if t.status == TaskStatus.COMPLETED)
        failed = sum(1 for t in tasks if t.status == TaskStatus.FAILED)
        in_progress = sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS)

        if failed > 0 and in_progress == 0:
            workflow.status = WorkflowStatus.FAILED
        elif completed == len(tasks):
            workflow.status = WorkflowStatus.COMPLETED
            workflow.completed_at = utc_now_iso()
        elif in_progress > 0:
            workflow.status = WorkflowStatus.EXECUTING
            if not workflow.started_at:
                workflow.started_at = utc_now_iso()
        elif workflow.status in (WorkflowStatus.FAILED, WorkflowStatus.PAUSED) and failed == 0:
            # A retry cleared the last failure.
            workflow.status = WorkflowStatus.EXECUTING

        workflow.current_step = completed
