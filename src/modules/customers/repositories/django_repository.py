"""Django ORM implementation of the Customer repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F, QuerySet
from django.db.models.functions import Greatest

from modules.core.repositories.interfaces import retry_read_once
from modules.customers.dtos import OrderCustomerSnapshotDTO
from modules.customers.models import Customer
from modules.customers.repositories.interfaces import ICustomerRepository


class CustomerDjangoRepository(ICustomerRepository):
    @retry_read_once
    def get_by_id(self, id: str) -> Optional[Customer]:
        try:
            return Customer.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    @retry_read_once
    def get_by_email(self, email: str) -> Optional[Customer]:
        return Customer.objects.filter(email=email.strip().lower()).first()

    @retry_read_once
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Customer]:
        return list(self.query(filters))

    def query(self, filters: Optional[Dict[str, Any]] = None) -> QuerySet[Customer]:
        queryset = Customer.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    def save(self, entity: Customer) -> Customer:
        entity.save()
        return entity

    @transaction.atomic
    def record_order(self, snapshot: OrderCustomerSnapshotDTO) -> Customer:
        customer, _ = Customer.objects.get_or_create(email=snapshot.email)

        changes: Dict[str, Any] = {
            "total_orders": F("total_orders") + 1,
            "total_spent": F("total_spent") + snapshot.order_total,
        }
        # latest checkout wins for contact details
        if snapshot.name:
            changes["name"] = snapshot.name
        if snapshot.phone:
            changes["phone"] = snapshot.phone
        if snapshot.user_id:
            changes["user_id"] = snapshot.user_id
        if customer.last_order_date is None:
            changes["last_order_date"] = snapshot.ordered_at
        else:
            changes["last_order_date"] = Greatest(F("last_order_date"), snapshot.ordered_at)

        Customer.objects.filter(pk=customer.pk).update(**changes)
        customer.refresh_from_db()
        return customer
