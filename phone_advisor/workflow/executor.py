"""
Workflow execution over the tool registry.

A wave is every task that is ready (pending, all dependencies completed)
at the moment the wave starts. Tasks in a wave run one at a time in list
order; tasks unblocked by this wave wait for the next one.

``run_wave`` executes exactly one wave. ``run_to_completion`` keeps
running waves, retrying failed tasks with exponential backoff, until the
workflow settles, the wave bound is hit, or its time budget runs out.
"""

import asyncio
import time
from typing import Callable, Optional

from phone_advisor.config import settings
from phone_advisor.logging_context import get_session_logger
from phone_advisor.schemas.workflow_schema import (
    Task,
    TaskStatus,
    WorkflowRunResult,
    WorkflowStatus,
)
from phone_advisor.tools.registry import ToolRegistry
from phone_advisor.workflow.planner import TaskPlanner
from phone_advisor.workflow.task_lifecycle import InvalidTransitionError

logger = get_session_logger(__name__)


def _not_found(workflow_id: str) -> WorkflowRunResult:
    return WorkflowRunResult(success=False, error=f"Workflow {workflow_id} not found")


class WorkflowExecutor:
    """Runs planned tasks through a ToolRegistry."""

    def __init__(
        self,
        planner: TaskPlanner,
        tools: ToolRegistry,
        retry_backoff_seconds: float = settings.planning.retry_backoff_seconds,
        max_waves: int = settings.planning.max_waves,
        max_duration_minutes: int = settings.planning.max_duration_minutes,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._planner = planner
        self._tools = tools
        self._retry_backoff_seconds = retry_backoff_seconds
        self._max_waves = max_waves
        self._max_duration_minutes = max_duration_minutes
        self._clock = clock

    async def run_wave(self, workflow_id: str) -> WorkflowRunResult:
        """Execute the tasks that are ready right now, then report."""
        if self._planner.get_workflow(workflow_id) is None:
            return _not_found(workflow_id)

        ready = self._planner.get_next_executable_tasks(workflow_id)
        for task in ready:
            await self._run_task(workflow_id, task)

        workflow = self._planner.get_workflow(workflow_id)
        return WorkflowRunResult(
            success=workflow.status == WorkflowStatus.COMPLETED,
            result=workflow,
            waves=1 if ready else 0,
        )

    async def run_to_completion(
        self,
        workflow_id: str,
        max_waves: Optional[int] = None,
        max_duration_minutes: Optional[int] = None,
    ) -> WorkflowRunResult:
        """
        Run waves until nothing is ready or the workflow is finished.

        Stops early when ``max_waves`` waves have run. If the time budget
        elapses between waves the workflow is paused and can be resumed
        by calling this again.
        """
        if self._planner.get_workflow(workflow_id) is None:
            return _not_found(workflow_id)

        wave_limit = self._max_waves if max_waves is None else max_waves
        budget = (
            self._max_duration_minutes if max_duration_minutes is None else max_duration_minutes
        )
        deadline = self._clock() + budget * 60
        waves = 0

        while waves < wave_limit:
            if not self._planner.get_next_executable_tasks(workflow_id):
                break
            if waves and self._clock() > deadline:
                logger.warning("Workflow %s exceeded %d minute budget", workflow_id, budget)
                self._planner.pause_workflow(workflow_id)
                break

            await self.run_wave(workflow_id)
            waves += 1

            workflow = self._planner.get_workflow(workflow_id)
            if workflow.status == WorkflowStatus.COMPLETED:
                break
            retried = await self._schedule_retries(workflow_id)
            if workflow.is_terminal() and not retried:
                break

        workflow = self._planner.get_workflow(workflow_id)
        error = None
        if workflow.status == WorkflowStatus.FAILED:
            error = f"Workflow {workflow_id} failed"
        elif workflow.status == WorkflowStatus.PAUSED:
            error = f"Workflow {workflow_id} paused after exceeding its time budget"

        logger.info(
            "Workflow %s finished %d waves with status %s",
            workflow_id, waves, workflow.status.value,
        )
        return WorkflowRunResult(
            success=workflow.status == WorkflowStatus.COMPLETED,
            result=workflow,
            error=error,
            waves=waves,
        )

    async def _run_task(self, workflow_id: str, task: Task) -> None:
        current = self._planner.get_workflow(workflow_id).get_task(task.id)
        if current is None or current.status != TaskStatus.PENDING:
            return

        self._planner.update_task_status(workflow_id, task.id, TaskStatus.IN_PROGRESS)
        try:
            outcome = await self._tools.execute_tool(task.tool, task.parameters)
        except Exception as exc:
            logger.exception("Task %s raised while calling '%s'", task.id, task.tool)
            self._finish(workflow_id, task.id, TaskStatus.FAILED, error=str(exc) or "Unknown error")
            return

        if outcome.success:
            self._finish(workflow_id, task.id, TaskStatus.COMPLETED, result=outcome.data)
        else:
            logger.warning("Task %s failed: %s", task.id, outcome.error)
            self._finish(
                workflow_id, task.id, TaskStatus.FAILED,
                error=outcome.error or "Tool execution failed",
            )

    def _finish(self, workflow_id, task_id, status, result=None, error=None) -> None:
        try:
            self._planner.update_task_status(workflow_id, task_id, status, result=result, error=error)
        except InvalidTransitionError:
            # Cancelled while the tool call was in flight.
            logger.info("Discarding result of task %s: no longer in progress", task_id)

    async def _schedule_retries(self, workflow_id: str) -> bool:
        workflow = self._planner.get_workflow(workflow_id)
        retried = False
        for task in workflow.tasks:
            if task.status != TaskStatus.FAILED or task.retry_count >= task.max_retries:
                continue
            delay = self._retry_backoff_seconds * 2 ** task.retry_count
            if delay > 0:
                await asyncio.sleep(delay)
            retried = self._planner.reset_task_for_retry(workflow_id, task.id) or retried
        return retried
