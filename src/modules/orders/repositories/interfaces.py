"""Order repository interface.

Extends ``IRepository[Order]`` with what the Order aggregate needs:
order-number assignment, idempotency-key look-up and the conditional
writes that collapse read-check-write into one statement.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root."""

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[Order]:
        """Retrieve an order by UUID; ``None`` for unknown or malformed ids."""

    @abstractmethod
    def get_by_number(self, order_number: str) -> Optional[Order]:
        """Retrieve an order by its human-facing number."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        """List orders with optional filters, newest first."""

    @abstractmethod
    def query(self, filters: Optional[Dict[str, Any]] = None) -> Iterable[Order]:
        """Lazy, filterable variant of ``list`` for paginated API listings."""

    @abstractmethod
    def get_by_idempotency_key(self, key: str) -> Optional[Order]:
        """Retrieve an order by its idempotency key."""

    @abstractmethod
    def next_order_number(self, year: int) -> str:
        """Draw the next number of *year*'s sequence.

        Must run inside the order-creation transaction; the counter row
        stays locked until it commits.
        """

    @abstractmethod
    def create(self, order: Order) -> Order:
        """Insert a new order row."""

    @abstractmethod
    def update_status(
        self,
        id: str,
        expected_status: str,
        new_status: str,
        assigned_to: Optional[str] = None,
    ) -> int:
        """``UPDATE ... WHERE id AND status = expected [AND assigned_to]``.

        Returns the number of affected rows (0 or 1).
        """

    @abstractmethod
    def update_assignment(self, id: str, assigned_to: Optional[str]) -> int:
        """Set or clear ``assigned_to``; returns the affected row count."""

    @abstractmethod
    def update_refund(
        self,
        id: str,
        expected_refund_status: Optional[str],
        fields: Dict[str, Any],
    ) -> int:
        """Write refund *fields* only if ``refund_status`` is still the expected one."""

    @abstractmethod
    def update_details(self, id: str, fields: Dict[str, Any]) -> int:
        """Write shipping/notes *fields* by primary key."""
