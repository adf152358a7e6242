"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.

Concurrency control: every mutation of an existing order is a single
``UPDATE ... WHERE`` carrying its precondition (expected status, expected
refund status, expected assignee), so two racing requests cannot both
succeed against a stale read.  The affected-row count tells the service
whether the precondition still held.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, QuerySet
from django.utils import timezone

from modules.core.repositories.interfaces import retry_read_once
from modules.orders.constants import ORDER_NUMBER_SEQUENCE_WIDTH
from modules.orders.models import Order, OrderNumberSequence
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @retry_read_once
    def get_by_id(self, id: str) -> Optional[Order]:
        """Returns ``None`` for non-existent or invalid IDs."""
        try:
            return Order.objects.select_related("offer").filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    @retry_read_once
    def get_by_number(self, order_number: str) -> Optional[Order]:
        return (
            Order.objects.select_related("offer")
            .filter(order_number=order_number)
            .first()
        )

    @retry_read_once
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """Supported filter keys: any ``Order`` field lookup
        (``status``, ``assigned_to``, ``customer_email``, ``created_at__gte`` ...).
        """
        return list(self.query(filters))

    def query(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Order]:
        queryset = Order.objects.select_related("offer")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @retry_read_once
    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        return Order.objects.filter(idempotency_key=key).first()

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def next_order_number(self, year: int) -> str:
        with transaction.atomic():
            OrderNumberSequence.objects.get_or_create(year=year)
            OrderNumberSequence.objects.filter(year=year).update(
                last_value=F("last_value") + 1
            )
            value = (
                OrderNumberSequence.objects.filter(year=year)
                .values_list("last_value", flat=True)
                .get()
            )
        prefix = getattr(settings, "ORDER_NUMBER_PREFIX", "ORD")
        return f"{prefix}-{year}-{value:0{ORDER_NUMBER_SEQUENCE_WIDTH}d}"

    def create(self, order: Order) -> Order:
        order.save(force_insert=True)
        logger.info(
            "order.persisted",
            order_id=str(order.id),
            order_number=order.order_number,
        )
        return order

    def save(self, entity: Order) -> Order:
        entity.save()
        return entity

    # ------------------------------------------------------------------
    # Conditional writes
    # ------------------------------------------------------------------

    def update_status(
        self,
        id: str,
        expected_status: str,
        new_status: str,
        assigned_to: Optional[str] = None,
    ) -> int:
        queryset = Order.objects.filter(id=id, status=expected_status)
        if assigned_to is not None:
            queryset = queryset.filter(assigned_to=assigned_to)
        return queryset.update(status=new_status, updated_at=timezone.now())

    def update_assignment(self, id: str, assigned_to: Optional[str]) -> int:
        return Order.objects.filter(id=id).update(
            assigned_to=assigned_to, updated_at=timezone.now()
        )

    def update_refund(
        self,
        id: str,
        expected_refund_status: Optional[str],
        fields: Dict[str, Any],
    ) -> int:
        queryset = Order.objects.filter(id=id)
        if expected_refund_status is None:
            queryset = queryset.filter(refund_status__isnull=True)
        else:
            queryset = queryset.filter(refund_status=expected_refund_status)
        return queryset.update(**fields, updated_at=timezone.now())

    def update_details(self, id: str, fields: Dict[str, Any]) -> int:
        return Order.objects.filter(id=id).update(**fields, updated_at=timezone.now())
