"""Order status state machine.

One canonical graph for every role::

    pending -> confirmed -> processing -> packing -> packed -> shipped -> delivered
    (any non-terminal status) -> cancelled

``delivered`` and ``cancelled`` are terminal.  Two edges are guarded by
the fulfillment workflow:

- ``processing -> packing`` needs the workflow to have started (a
  ``packing`` task exists);
- ``packing -> packed`` needs every workflow step completed.

Checks run in this order, the first failure wins: order exists,
actor may act on it, edge exists, workflow guard.  The write itself is
conditional on the status (and, for workers, the assignee) that was
checked, so a concurrent transition makes it affect zero rows; the
checks are then repeated against the fresh row to report why.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from django.db import transaction

from modules.core.exceptions import IllegalTransition, PrerequisiteNotMet
from modules.fulfillment import workflow
from modules.orders.constants import OrderStatus
from modules.orders.events import OrderCancelled, OrderStatusChanged
from modules.orders.exceptions import OrderNotFound
from shared.infrastructure.bus import event_bus

if TYPE_CHECKING:
    from modules.fulfillment.repositories.interfaces import ITaskRepository
    from modules.orders.assignment import AssignmentCoordinator
    from modules.orders.models import Order
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.staff.actor import Actor

logger = structlog.get_logger(__name__)


class OrderStatusStateMachine:
    def __init__(
        self,
        order_repository: IOrderRepository,
        task_repository: ITaskRepository,
        coordinator: AssignmentCoordinator,
    ) -> None:
        self._orders = order_repository
        self._tasks = task_repository
        self._coordinator = coordinator

    @transaction.atomic
    def transition(self, order_id: str, requested_status: str, actor: Actor) -> Order:
        """Move *order_id* to *requested_status* on behalf of *actor*.

        Never touches ``refund_status``; refunds are a separate admin action.

        Raises:
            OrderNotFound: the order does not exist.
            Forbidden: a worker acting on an order not assigned to them.
            IllegalTransition: *requested_status* is not an edge from the
                persisted status.
            PrerequisiteNotMet: a workflow guard failed.
        """
        order = self._orders.get_by_id(order_id)
        if order is None:
            raise OrderNotFound(f"Order {order_id} not found.")

        log = logger.bind(
            order_id=str(order.id),
            actor_id=actor.id,
            current_status=order.status,
            new_status=requested_status,
        )
        self.check(order, requested_status, actor)

        updated = self._orders.update_status(
            str(order.id),
            expected_status=order.status,
            new_status=requested_status,
            assigned_to=self._coordinator.ownership_scope(actor),
        )
        if not updated:
            log.warning("order.transition_conflict")
            fresh = self._orders.get_by_id(str(order.id))
            if fresh is None:
                raise OrderNotFound(f"Order {order_id} not found.")
            self.check(fresh, requested_status, actor)
            raise IllegalTransition(
                "The order changed while the request was processed; reload and retry.",
                current_status=fresh.status,
            )

        old_status = order.status
        order = self._orders.get_by_id(str(order.id))
        log.info("order.status_updated")

        event_bus.publish_on_commit(
            OrderStatusChanged(
                aggregate_id=order.id,
                old_status=old_status,
                new_status=requested_status,
                actor_id=actor.id,
            )
        )
        if requested_status == OrderStatus.CANCELLED:
            event_bus.publish_on_commit(
                OrderCancelled(
                    aggregate_id=order.id,
                    previous_status=old_status,
                    refund_eligible=order.refund_eligible,
                    actor_id=actor.id,
                )
            )
        return order

    def check(self, order: Order, requested_status: str, actor: Actor) -> None:
        """Run every precondition of the transition against *order*."""
        self._coordinator.ensure_can_act_on(order, actor)

        if requested_status not in OrderStatus.values:
            raise IllegalTransition(f"Unknown status '{requested_status}'.")
        if not order.can_transition_to(requested_status):
            raise IllegalTransition(
                f"Cannot transition from {order.status} to {requested_status}.",
                current_status=order.status,
            )

        self._check_workflow_guard(order, requested_status)

    def _check_workflow_guard(self, order: Order, requested_status: str) -> None:
        edge = (order.status, requested_status)
        if edge == (OrderStatus.PROCESSING, OrderStatus.PACKING):
            tasks = self._tasks.list_for_order(str(order.id))
            if not workflow.has_started(tasks):
                raise PrerequisiteNotMet(
                    "Create the packing task before moving the order to packing."
                )
        elif edge == (OrderStatus.PACKING, OrderStatus.PACKED):
            step = workflow.current_step(self._tasks.list_for_order(str(order.id)))
            if step is not None:
                raise PrerequisiteNotMet(
                    f"Fulfillment step '{step.type}' is not completed.",
                    pending_step=step.type,
                )
