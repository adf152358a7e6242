"""Order service layer (Use Cases).

Orchestrates order creation, status transitions, assignment and the
refund sub-flow.  All write operations are atomic: the service defines
the unit-of-work boundary.

Business rules enforced:
- Offer validation happens strictly before anything is persisted; a
  failed validation creates no order.
- Offer usage is recorded once, in the transaction that creates the
  order; a duplicate personal redemption rolls the whole order back.
- Idempotency via ``Idempotency-Key``: a replayed request returns the
  original order and records no second usage.
- Status transitions go through ``OrderStatusStateMachine``; assignment
  and worker scoping through ``AssignmentCoordinator``.
- Refunds are an explicit admin action on cancelled, prepaid orders.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

import structlog
from django.db import IntegrityError, transaction
from django.utils import timezone

from modules.core.exceptions import Forbidden, IllegalTransition
from modules.offers.audience import CustomerIdentity
from modules.offers.services import OfferValidator, UsageTracker
from modules.orders.assignment import AssignmentCoordinator
from modules.orders.constants import (
    ONLINE_PAYMENT_METHODS,
    REFUND_TRANSITIONS,
    REFUNDABLE_PAYMENT_STATUSES,
    OrderStatus,
    PaymentStatus,
    RefundStatus,
)
from modules.orders.dtos import RefundDetailsDTO
from modules.orders.events import OrderCreated
from modules.orders.exceptions import OrderNotFound, RefundNotApplicable
from modules.orders.models import Order
from modules.orders.state_machine import OrderStatusStateMachine
from shared.infrastructure.bus import event_bus

if TYPE_CHECKING:
    from modules.fulfillment.repositories.interfaces import ITaskRepository
    from modules.offers.dtos import ValidatedOffer
    from modules.offers.repositories.interfaces import IOfferRepository
    from modules.orders.dtos import CreateOrderDTO, OrderDetailsUpdateDTO, RefundUpdateDTO
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.staff.actor import Actor
    from modules.staff.repositories.interfaces import IStaffRepository

logger = structlog.get_logger(__name__)


class OrderService:
    """Application service for Order use-cases.

    Receives repositories via constructor injection (DIP).
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        offer_repository: IOfferRepository,
        staff_repository: IStaffRepository,
        task_repository: ITaskRepository,
    ) -> None:
        self._order_repo = order_repository
        self._offer_validator = OfferValidator(offer_repository)
        self._usage_tracker = UsageTracker(offer_repository)
        self._coordinator = AssignmentCoordinator(order_repository, staff_repository)
        self._state_machine = OrderStatusStateMachine(
            order_repository, task_repository, self._coordinator
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO) -> Order:
        """Create an order from a completed checkout.

        Steps:
        1. Idempotency check.
        2. Validate the offer code, if any (no writes).
        3. Draw the order number and persist the order.
        4. Record offer usage in the same transaction.
        5. Publish ``OrderCreated`` after commit.

        Raises:
            OfferNotFound, OfferInactive, OfferExpired, MinOrderNotMet,
            UsageLimitReached, AlreadyUsedByCustomer, NotEligible.
        """
        log = logger.bind(customer_email=dto.customer.email)
        log.info("order.creation_started")

        # 1. Idempotency check
        if dto.idempotency_key:
            existing = self._order_repo.get_by_idempotency_key(dto.idempotency_key)
            if existing:
                log.info(
                    "order.idempotency_hit",
                    order_id=str(existing.id),
                    key=dto.idempotency_key,
                )
                return existing

        customer = CustomerIdentity(id=dto.customer.user_id, email=dto.customer.email)
        subtotal = dto.items_subtotal

        # 2. Lock the discount
        validated: Optional[ValidatedOffer] = None
        if dto.offer_code and dto.offer_code.strip():
            validated = self._offer_validator.validate(dto.offer_code, subtotal, customer)

        # 3. Persist
        prepaid = dto.is_prepaid
        order = Order(
            order_number=self._order_repo.next_order_number(timezone.now().year),
            items=[item.snapshot() for item in dto.items],
            subtotal=subtotal,
            shipping=dto.shipping,
            discount=validated.discount if validated else None,
            offer=validated.offer if validated else None,
            customer_name=dto.customer.name,
            customer_email=dto.customer.email,
            customer_phone=dto.customer.phone,
            user_id=dto.customer.user_id or "",
            shipping_address=dto.shipping_address.snapshot(),
            payment_method=dto.payment_method,
            payment_status=PaymentStatus.PAID if prepaid else PaymentStatus.PENDING,
            payment_reference=dto.payment_reference,
            status=OrderStatus.CONFIRMED if prepaid else OrderStatus.PENDING,
            notes=dto.notes,
            idempotency_key=dto.idempotency_key or None,
        )
        try:
            with transaction.atomic():
                order = self._order_repo.create(order)
        except IntegrityError:
            # a concurrent request with the same key won the insert
            existing = (
                self._order_repo.get_by_idempotency_key(dto.idempotency_key)
                if dto.idempotency_key
                else None
            )
            if existing is None:
                raise
            log.info("order.idempotency_race", order_id=str(existing.id))
            return existing

        # 4. Record usage
        if validated is not None:
            self._usage_tracker.record_usage(validated.offer, customer)

        log.info(
            "order.created",
            order_id=str(order.id),
            order_number=order.order_number,
            total=str(order.total),
            offer_id=str(order.offer_id) if order.offer_id else None,
        )

        # 5. Notify
        event_bus.publish_on_commit(
            OrderCreated(
                aggregate_id=order.id,
                order_number=order.order_number,
                customer_email=order.customer_email,
                customer_name=order.customer_name,
                customer_phone=order.customer_phone,
                user_id=order.user_id,
                total=order.total,
            )
        )
        return order

    def transition_status(self, order_id: str, new_status: str, actor: Actor) -> Order:
        """See ``OrderStatusStateMachine.transition``."""
        order = self.get_order(order_id)
        return self._state_machine.transition(str(order.id), new_status, actor)

    def assign(self, order_id: str, worker_id: Optional[str], actor: Actor) -> Order:
        """See ``AssignmentCoordinator.assign``."""
        self._coordinator.ensure_elevated(actor, "Only admins can assign orders.")
        order = self.get_order(order_id)
        return self._coordinator.assign(str(order.id), worker_id, actor)

    @transaction.atomic
    def update_refund(self, order_id: str, dto: RefundUpdateDTO, actor: Actor) -> Order:
        """Advance the refund sub-flow of a cancelled, prepaid order.

        ``started -> processing -> completed | failed``; a failed refund
        may be started again.  ``completed`` marks the payment refunded.

        Raises:
            Forbidden: the actor is not elevated.
            OrderNotFound: the order does not exist.
            RefundNotApplicable: the order is not cancelled or was not paid online.
            IllegalTransition: the refund status change is not allowed.
        """
        self._coordinator.ensure_elevated(actor, "Only admins can update refunds.")
        order = self.get_order(order_id)
        log = logger.bind(
            order_id=str(order.id),
            actor_id=actor.id,
            current_refund_status=order.refund_status,
            new_refund_status=dto.refund_status,
        )
        self._check_refund(order, dto.refund_status)

        fields: Dict[str, Any] = {"refund_status": dto.refund_status}
        if dto.refund_reference is not None:
            fields["refund_reference"] = dto.refund_reference.strip()
        if dto.notes is not None:
            fields["refund_notes"] = dto.notes
        if dto.refund_status == RefundStatus.COMPLETED:
            fields["payment_status"] = PaymentStatus.REFUNDED

        updated = self._order_repo.update_refund(
            str(order.id), order.refund_status, fields
        )
        if not updated:
            log.warning("order.refund_conflict")
            fresh = self.get_order(str(order.id))
            self._check_refund(fresh, dto.refund_status)
            raise IllegalTransition(
                "The refund changed while the request was processed; reload and retry.",
                current_refund_status=fresh.refund_status,
            )

        log.info("order.refund_updated")
        return self.get_order(str(order.id))

    @transaction.atomic
    def update_details(
        self, order_id: str, dto: OrderDetailsUpdateDTO, actor: Actor
    ) -> Order:
        """Update shipping details and notes (elevated staff only)."""
        self._coordinator.ensure_elevated(actor, "Only admins can edit orders.")
        order = self.get_order(order_id)
        fields = dto.model_dump(exclude_none=True)
        if fields:
            self._order_repo.update_details(str(order.id), fields)
            logger.info(
                "order.details_updated",
                order_id=str(order.id),
                actor_id=actor.id,
                fields=sorted(fields),
            )
        return self.get_order(str(order.id))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: str) -> Order:
        """Retrieve a single order by UUID or order number.

        Raises:
            OrderNotFound: if the order does not exist.
        """
        order = self._order_repo.get_by_id(order_id) or self._order_repo.get_by_number(
            order_id
        )
        if not order:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def get_order_for(self, order_id: str, actor: Actor) -> Order:
        """``get_order`` restricted to what *actor* may see."""
        order = self.get_order(order_id)
        if not actor.is_elevated and order.assigned_to != actor.id:
            raise OrderNotFound(f"Order {order_id} not found.")
        return order

    def list_orders(
        self, actor: Actor, filters: Optional[Dict[str, Any]] = None
    ) -> List[Order]:
        """Workers only ever see orders assigned to them."""
        return list(self.orders_visible_to(actor, filters))

    def orders_visible_to(
        self, actor: Actor, filters: Optional[Dict[str, Any]] = None
    ) -> Iterable[Order]:
        scope = dict(filters or {})
        owner = self._coordinator.ownership_scope(actor)
        if owner is not None:
            scope["assigned_to"] = owner
        return self._order_repo.query(scope)

    def get_refund_details(self, order_id: str, actor: Actor) -> RefundDetailsDTO:
        if not actor.is_elevated:
            raise Forbidden("Only admins can view refunds.")
        return RefundDetailsDTO.from_entity(self.get_order(order_id))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_refund(order: Order, new_refund_status: str) -> None:
        if (
            order.status != OrderStatus.CANCELLED
            or order.payment_method not in ONLINE_PAYMENT_METHODS
            or order.payment_status not in REFUNDABLE_PAYMENT_STATUSES
        ):
            raise RefundNotApplicable()
        allowed = REFUND_TRANSITIONS.get(order.refund_status, set())
        if new_refund_status not in allowed:
            raise IllegalTransition(
                f"Cannot move refund from {order.refund_status or 'none'} "
                f"to {new_refund_status}.",
                current_refund_status=order.refund_status,
            )
