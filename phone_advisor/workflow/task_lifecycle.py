"""
Explicit task status transitions.

Every status change a task goes through must be listed in TRANSITIONS.
Starting a task additionally requires every dependency to be completed,
so a task can never run ahead of the tasks it depends on.

Usage:
    validate_transition(TaskStatus.PENDING, TaskStatus.IN_PROGRESS, deps_completed=True)
"""

import logging
from dataclasses import dataclass

from phone_advisor.schemas.workflow_schema import TaskStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transition:
    """A single valid task status transition."""
    from_status: TaskStatus
    to_status: TaskStatus
    requires_dependencies: bool = False


class InvalidTransitionError(Exception):
    """Raised when a task status change is not allowed."""


TRANSITIONS: list[Transition] = [
    # --- Scheduling ---
    Transition(TaskStatus.PENDING, TaskStatus.IN_PROGRESS, requires_dependencies=True),
    Transition(TaskStatus.PENDING, TaskStatus.CANCELLED),

    # --- Execution result ---
    Transition(TaskStatus.IN_PROGRESS, TaskStatus.COMPLETED),
    Transition(TaskStatus.IN_PROGRESS, TaskStatus.FAILED),
    Transition(TaskStatus.IN_PROGRESS, TaskStatus.CANCELLED),

    # --- Retry ---
    Transition(TaskStatus.FAILED, TaskStatus.PENDING),
]


def get_valid_targets(current: TaskStatus) -> list[TaskStatus]:
    """Return every status reachable from ``current``."""
    return [t.to_status for t in TRANSITIONS if t.from_status == current]


def validate_transition(
    current: TaskStatus, target: TaskStatus, deps_completed: bool = True
) -> None:
    """
    Check a task status change.

    Raises:
        InvalidTransitionError: If the transition is not listed, or it
            starts a task whose dependencies are not all completed.
    """
    for t in TRANSITIONS:
        if t.from_status == current and t.to_status == target:
            if t.requires_dependencies and not deps_completed:
                raise InvalidTransitionError(
                    f"Cannot move task to '{target.value}': dependencies not completed"
                )
            return

    valid = [s.value for s in get_valid_targets(current)]
    raise InvalidTransitionError(
        f"No valid transition from '{current.value}' to '{target.value}'. "
        f"Valid targets: {valid}"
    )
