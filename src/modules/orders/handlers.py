"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import (
    OrderAssigned,
    OrderCancelled,
    OrderCreated,
    OrderStatusChanged,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    """Push the customer snapshot to the reporting profile.

    Fire-and-forget: a broker failure is logged and never surfaces to the
    checkout that created the order.
    """

    def handle(self, event: OrderCreated) -> None:
        from modules.customers.tasks import sync_customer_profile

        log = logger.bind(order_id=str(event.aggregate_id))
        try:
            sync_customer_profile.delay(
                email=event.customer_email,
                name=event.customer_name,
                phone=event.customer_phone,
                user_id=event.user_id,
                order_total=str(event.total),
                ordered_at=event.occurred_on.isoformat(),
            )
        except Exception as exc:
            log.error("order.customer_sync_enqueue_failed", error=str(exc))
            return
        log.info("order.customer_sync_enqueued")


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        logger.info(
            "order.event.cancelled",
            order_id=str(event.aggregate_id),
            previous_status=event.previous_status,
            refund_eligible=event.refund_eligible,
        )


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=str(event.aggregate_id),
            old_status=event.old_status,
            new_status=event.new_status,
        )


class OrderAssignedHandler(IEventHandler[OrderAssigned]):
    def handle(self, event: OrderAssigned) -> None:
        logger.info(
            "order.event.assigned",
            order_id=str(event.aggregate_id),
            assigned_to=event.assigned_to,
        )


order_created_handler = OrderCreatedHandler()
order_cancelled_handler = OrderCancelledHandler()
order_status_changed_handler = OrderStatusChangedHandler()
order_assigned_handler = OrderAssignedHandler()
