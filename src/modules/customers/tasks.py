"""Asynchronous tasks of the customers module."""

from __future__ import annotations

import structlog
from celery import shared_task
from django.utils import timezone

from modules.customers.dtos import OrderCustomerSnapshotDTO
from modules.customers.repositories.django_repository import CustomerDjangoRepository
from modules.customers.services import CustomerService

logger = structlog.get_logger(__name__)


@shared_task(
    name="customers.sync_customer_profile",
    autoretry_for=(ConnectionError,),
    retry_backoff=True,
    max_retries=3,
)
def sync_customer_profile(
    email: str,
    name: str = "",
    phone: str = "",
    user_id: str = "",
    order_total: str = "0",
    ordered_at: str = "",
) -> dict:
    """Fold one created order into the customer's reporting profile."""
    snapshot = OrderCustomerSnapshotDTO(
        email=email,
        name=name,
        phone=phone,
        user_id=user_id or None,
        order_total=order_total,
        ordered_at=ordered_at or timezone.now(),
    )
    customer = CustomerService(CustomerDjangoRepository()).upsert_from_order(snapshot)
    return {"customer_id": str(customer.id), "total_orders": customer.total_orders}
