"""Customer service layer (Use Cases).

Profiles are maintained from order snapshots; staff can list and read
them for reporting.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

import structlog

from modules.core.exceptions import Forbidden
from modules.customers.exceptions import CustomerNotFound

if TYPE_CHECKING:
    from modules.customers.dtos import OrderCustomerSnapshotDTO
    from modules.customers.models import Customer
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.staff.actor import Actor

logger = structlog.get_logger(__name__)


class CustomerService:
    """Application service for Customer use-cases.

    Receives an ``ICustomerRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: ICustomerRepository) -> None:
        self._repo = repository

    def upsert_from_order(self, snapshot: OrderCustomerSnapshotDTO) -> Customer:
        customer = self._repo.record_order(snapshot)
        logger.info(
            "customer.profile_synced",
            customer_id=str(customer.id),
            total_orders=customer.total_orders,
        )
        return customer

    def customers_visible_to(
        self, actor: Actor, filters: Optional[Dict[str, Any]] = None
    ) -> Iterable[Customer]:
        if not actor.is_elevated:
            raise Forbidden("Only admins can browse customers.")
        return self._repo.query(filters)

    def get_customer(self, id: str, actor: Actor) -> Customer:
        """Raises:
        CustomerNotFound: if the customer does not exist.
        """
        if not actor.is_elevated:
            raise Forbidden("Only admins can browse customers.")
        customer = self._repo.get_by_id(id)
        if not customer:
            raise CustomerNotFound(f"Customer {id} not found.")
        return customer
