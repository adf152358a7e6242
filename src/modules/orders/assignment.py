"""Order assignment and worker-scoped authorization.

``AssignmentCoordinator`` is the only place that decides who may act on
an order:

- elevated staff (superadmin/admin) may act on any order and are the only
  ones who may (re)assign it;
- a worker may act only on orders currently assigned to them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import structlog
from django.db import transaction

from modules.core.exceptions import Forbidden
from modules.orders.events import OrderAssigned
from modules.orders.exceptions import OrderNotFound
from modules.staff.exceptions import WorkerNotFound
from shared.infrastructure.bus import event_bus

if TYPE_CHECKING:
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.staff.actor import Actor
    from modules.staff.repositories.interfaces import IStaffRepository

logger = structlog.get_logger(__name__)


class AssignmentCoordinator:
    def __init__(
        self,
        order_repository: IOrderRepository,
        staff_repository: IStaffRepository,
    ) -> None:
        self._orders = order_repository
        self._staff = staff_repository

    # ------------------------------------------------------------------
    # Authorization
    # ------------------------------------------------------------------

    @staticmethod
    def ensure_can_act_on(order: Order, actor: Actor) -> None:
        """Raise ``Forbidden`` unless *actor* may mutate *order*."""
        if actor.is_elevated:
            return
        if order.assigned_to is None or order.assigned_to != actor.id:
            logger.warning(
                "order.forbidden_for_worker",
                order_id=str(order.id),
                actor_id=actor.id,
                assigned_to=order.assigned_to,
            )
            raise Forbidden("This order is not assigned to you.")

    @staticmethod
    def ensure_elevated(actor: Actor, detail: str) -> None:
        if not actor.is_elevated:
            raise Forbidden(detail)

    @staticmethod
    def ownership_scope(actor: Actor) -> Optional[str]:
        """The ``assigned_to`` value a conditional write must match, if any."""
        return None if actor.is_elevated else actor.id

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def assign(self, order_id: str, worker_id: Optional[str], actor: Actor) -> Order:
        """Bind *order_id* to *worker_id*; ``None`` unassigns.  Status is untouched.

        Raises:
            Forbidden: the actor is not elevated.
            OrderNotFound: the order does not exist.
            WorkerNotFound: no active directory entry for *worker_id*.
        """
        self.ensure_elevated(actor, "Only admins can assign orders.")

        order = self._orders.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")

        worker_id = (worker_id or "").strip() or None
        if worker_id is not None:
            member = self._staff.get_by_username(worker_id)
            if member is None or not member.is_active:
                raise WorkerNotFound(f"No active staff member '{worker_id}'.")

        log = logger.bind(order_id=str(order.id), actor_id=actor.id)
        previous = order.assigned_to
        self._orders.update_assignment(str(order.id), worker_id)
        log.info("order.assigned", assigned_to=worker_id, previous_assignee=previous)

        event_bus.publish_on_commit(
            OrderAssigned(
                aggregate_id=order.id,
                assigned_to=worker_id,
                previous_assignee=previous,
                actor_id=actor.id,
            )
        )
        return self._orders.get_by_id(str(order.id))
