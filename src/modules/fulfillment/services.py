"""Fulfillment task administration.

Tasks are created explicitly by elevated staff, one workflow step at a
time; nothing here chains the next step automatically.  Creation is
idempotent per ``(order, type)``: the unique constraint on the task
table makes a racing duplicate fail, and the existing task is returned.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import IntegrityError, transaction
from django.utils import timezone

from modules.core.exceptions import Forbidden, PrerequisiteNotMet
from modules.fulfillment import workflow
from modules.fulfillment.constants import TaskStatus
from modules.fulfillment.dtos import WorkflowStepStateDTO, WorkflowSummaryDTO
from modules.fulfillment.exceptions import TaskNotFound
from modules.orders.constants import OrderStatus
from modules.orders.exceptions import OrderNotFound
from modules.staff.exceptions import WorkerNotFound

if TYPE_CHECKING:
    from modules.fulfillment.dtos import CreateTaskDTO, UpdateTaskDTO
    from modules.fulfillment.models import Task
    from modules.fulfillment.repositories.interfaces import ITaskRepository
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.staff.actor import Actor
    from modules.staff.repositories.interfaces import IStaffRepository

logger = structlog.get_logger(__name__)

TASKABLE_ORDER_STATUSES = frozenset(
    {OrderStatus.CONFIRMED, OrderStatus.PROCESSING, OrderStatus.PACKING}
)


class TaskService:
    def __init__(
        self,
        task_repository: ITaskRepository,
        order_repository: IOrderRepository,
        staff_repository: IStaffRepository,
    ) -> None:
        self._tasks = task_repository
        self._orders = order_repository
        self._staff = staff_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_task(self, dto: CreateTaskDTO, actor: Actor) -> Task:
        """Create the task of one workflow step.

        Raises:
            Forbidden: the actor is not elevated.
            OrderNotFound: the order does not exist.
            PrerequisiteNotMet: the order is unassigned, not in a
                fulfillable status, or the previous step is not completed.
            WorkerNotFound: the assignee is not an active staff member.
        """
        if not actor.is_elevated:
            raise Forbidden("Only admins can create tasks.")

        order = self._get_order(dto.order_id)
        log = logger.bind(order_id=str(order.id), type=dto.type, actor_id=actor.id)

        existing = self._tasks.get_by_order_and_type(str(order.id), dto.type)
        if existing is not None:
            log.info("task.already_exists", task_id=str(existing.id))
            return existing

        if not order.assigned_to:
            raise PrerequisiteNotMet("Assign the order to a worker before creating tasks.")
        if order.status not in TASKABLE_ORDER_STATUSES:
            raise PrerequisiteNotMet(
                f"Tasks cannot be created for an order in status {order.status}.",
                current_status=order.status,
            )

        previous = workflow.previous_step(dto.type)
        if previous is not None and not workflow.is_step_completed(
            previous.type, self._tasks.list_for_order(str(order.id))
        ):
            raise PrerequisiteNotMet(
                f"Step '{previous.type}' must be completed first.",
                pending_step=previous.type,
            )

        assignee = (dto.assigned_to or "").strip() or order.assigned_to
        self._ensure_active_worker(assignee)

        try:
            with transaction.atomic():
                task = self._tasks.create(
                    {
                        "order_id": order.id,
                        "order_number": order.order_number,
                        "type": dto.type,
                        "status": TaskStatus.PENDING,
                        "assigned_to": assignee,
                        "assigned_by": actor.id,
                        "priority": dto.priority,
                        "notes": dto.notes,
                    }
                )
        except IntegrityError:
            existing = self._tasks.get_by_order_and_type(str(order.id), dto.type)
            if existing is None:
                raise
            log.info("task.create_race", task_id=str(existing.id))
            return existing

        log.info("task.created", task_id=str(task.id), assigned_to=assignee)
        return task

    @transaction.atomic
    def update_task(self, task_id: str, dto: UpdateTaskDTO, actor: Actor) -> Task:
        """Update a task.

        Workers may change only ``status`` and ``notes`` of their own tasks.
        ``completed_at`` is stamped on the first completion and kept forever.

        Raises:
            TaskNotFound, Forbidden, WorkerNotFound.
        """
        task = self.get_task(task_id)
        log = logger.bind(task_id=str(task.id), actor_id=actor.id)

        if not actor.is_elevated:
            if task.assigned_to != actor.id:
                raise Forbidden("This task is not assigned to you.")
            if dto.touches_elevated_fields:
                raise Forbidden("Only admins can reassign or reprioritize tasks.")

        fields: Dict[str, Any] = dto.model_dump(exclude_none=True)
        if "assigned_to" in fields:
            fields["assigned_to"] = fields["assigned_to"].strip()
            self._ensure_active_worker(fields["assigned_to"])

        if fields:
            self._tasks.update(str(task.id), fields)
        if dto.status == TaskStatus.COMPLETED:
            self._tasks.mark_completed_once(str(task.id), timezone.now())

        log.info(
            "task.updated",
            fields=sorted(fields),
            old_status=task.status,
            new_status=dto.status or task.status,
        )
        return self.get_task(str(task.id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_task(self, task_id: str) -> Task:
        task = self._tasks.get_by_id(task_id)
        if task is None:
            raise TaskNotFound(f"Task {task_id} not found.")
        return task

    def get_task_for(self, task_id: str, actor: Actor) -> Task:
        task = self.get_task(task_id)
        if not actor.is_elevated and task.assigned_to != actor.id:
            raise TaskNotFound(f"Task {task_id} not found.")
        return task

    def list_tasks(
        self, actor: Actor, filters: Optional[Dict[str, Any]] = None
    ) -> List[Task]:
        """Filter keys: ``order_id``, ``assigned_to``, ``status``, ``type``.

        Workers only see their own tasks.
        """
        scope = {key: value for key, value in (filters or {}).items() if value}
        if not actor.is_elevated:
            scope["assigned_to"] = actor.id
        return self._tasks.list(scope)

    def workflow_summary(self, order_id: str, actor: Actor) -> WorkflowSummaryDTO:
        order = self._get_order(order_id)
        if not actor.is_elevated and order.assigned_to != actor.id:
            raise OrderNotFound(f"Order {order_id} not found.")

        tasks = self._tasks.list_for_order(str(order.id))
        by_type = {task.type: task for task in tasks}
        current = workflow.current_step(tasks)

        steps = []
        for step in workflow.WORKFLOW_STEPS:
            task = by_type.get(step.type)
            steps.append(
                WorkflowStepStateDTO(
                    type=step.type,
                    name=step.name,
                    description=step.description,
                    order=step.order,
                    required=step.required,
                    completed=workflow.is_step_completed(step.type, tasks),
                    task_id=str(task.id) if task else None,
                    task_status=task.status if task else None,
                    assigned_to=task.assigned_to if task else None,
                )
            )

        return WorkflowSummaryDTO(
            order_id=str(order.id),
            order_number=order.order_number,
            progress_percent=workflow.progress_percent(tasks),
            current_step=current.type if current else None,
            steps=steps,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_order(self, order_id: str) -> Order:
        order = self._orders.get_by_id(order_id) or self._orders.get_by_number(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def _ensure_active_worker(self, username: str) -> None:
        member = self._staff.get_by_username(username)
        if member is None or not member.is_active:
            raise WorkerNotFound(f"No active staff member '{username}'.")
