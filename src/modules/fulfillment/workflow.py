"""Fulfillment workflow engine.

Pure functions over the fixed three-step workflow::

    packing (1) -> quality_check (2) -> shipping_prep (3)

Everything here is derived from the persisted tasks of one order; nothing
reads the clock or the database.  The order state machine uses
``current_step`` as the guard of its ``packing -> packed`` edge, so an
order cannot be marked packed while a step is still open.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Protocol, Tuple

from modules.fulfillment.constants import TaskStatus, TaskType


class TaskLike(Protocol):
    type: str
    status: str


@dataclass(frozen=True)
class WorkflowStep:
    type: str
    name: str
    description: str
    order: int
    required: bool = True


WORKFLOW_STEPS: Tuple[WorkflowStep, ...] = (
    WorkflowStep(
        type=TaskType.PACKING,
        name="Packing",
        description="Pick the items and pack them for shipment.",
        order=1,
    ),
    WorkflowStep(
        type=TaskType.QUALITY_CHECK,
        name="Quality check",
        description="Verify contents, quantities and packaging.",
        order=2,
    ),
    WorkflowStep(
        type=TaskType.SHIPPING_PREP,
        name="Shipping preparation",
        description="Label the parcel and hand it to the courier.",
        order=3,
    ),
)


def step_by_type(task_type: str) -> Optional[WorkflowStep]:
    for step in WORKFLOW_STEPS:
        if step.type == task_type:
            return step
    return None


def next_step(current_type: Optional[str] = None) -> Optional[WorkflowStep]:
    """The step after *current_type*, or the first step when it is ``None``."""
    if current_type is None:
        return WORKFLOW_STEPS[0]
    current = step_by_type(current_type)
    if current is None:
        return None
    for step in WORKFLOW_STEPS:
        if step.order == current.order + 1:
            return step
    return None


def previous_step(task_type: str) -> Optional[WorkflowStep]:
    current = step_by_type(task_type)
    if current is None:
        return None
    for step in WORKFLOW_STEPS:
        if step.order == current.order - 1:
            return step
    return None


def steps_up_to(task_type: str) -> Tuple[WorkflowStep, ...]:
    """All steps up to and including *task_type*, in workflow order."""
    current = step_by_type(task_type)
    if current is None:
        return ()
    return tuple(step for step in WORKFLOW_STEPS if step.order <= current.order)


def is_step_completed(task_type: str, tasks: Iterable[TaskLike]) -> bool:
    return any(
        task.type == task_type and task.status == TaskStatus.COMPLETED
        for task in tasks
    )


def completed_steps(tasks: Iterable[TaskLike]) -> Tuple[WorkflowStep, ...]:
    tasks = list(tasks)
    return tuple(step for step in WORKFLOW_STEPS if is_step_completed(step.type, tasks))


def progress_percent(tasks: Iterable[TaskLike]) -> int:
    """Share of completed steps, 0-100, rounded half up (0, 33, 67, 100)."""
    done = len(completed_steps(tasks))
    percent = Decimal(100 * done) / Decimal(len(WORKFLOW_STEPS))
    return int(percent.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def current_step(tasks: Iterable[TaskLike]) -> Optional[WorkflowStep]:
    """First step not yet completed; ``None`` once the workflow is done."""
    tasks = list(tasks)
    for step in WORKFLOW_STEPS:
        if not is_step_completed(step.type, tasks):
            return step
    return None


def has_started(tasks: Iterable[TaskLike]) -> bool:
    """Whether the first step has a task, whatever its status."""
    first = WORKFLOW_STEPS[0].type
    return any(task.type == first for task in tasks)
