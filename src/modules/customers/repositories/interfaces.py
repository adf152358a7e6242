"""Customer repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.customers.dtos import OrderCustomerSnapshotDTO
    from modules.customers.models import Customer


class ICustomerRepository(IRepository["Customer"]):
    @abstractmethod
    def get_by_email(self, email: str) -> Optional[Customer]:
        """Retrieve a profile by (normalized) email."""

    @abstractmethod
    def query(self, filters: Optional[Dict[str, Any]] = None) -> Iterable[Customer]:
        """Lazy, filterable listing for the staff API."""

    @abstractmethod
    def record_order(self, snapshot: OrderCustomerSnapshotDTO) -> Customer:
        """Create or update the profile and count one more order."""
