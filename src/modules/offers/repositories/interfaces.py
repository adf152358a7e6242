"""Offer repository interface (the OfferStore).

Persistence for offer definitions and per-customer usage records.
The usage insert is the strict half of usage enforcement: it must be a
uniqueness-constrained write, never a read followed by a write.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.offers.audience import CustomerIdentity
    from modules.offers.models import Offer, OfferUsage


class IOfferRepository(IRepository["Offer"]):
    @abstractmethod
    def get_by_code(self, code: str) -> Optional[Offer]:
        """Look an offer up by its normalized (uppercase) code."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Offer]:
        """List offers, newest first."""

    @abstractmethod
    def has_usage(self, offer_id: UUID, customer: CustomerIdentity) -> bool:
        """``True`` if a usage row exists for the customer's id or email."""

    @abstractmethod
    def insert_usage(self, offer_id: UUID, customer: CustomerIdentity) -> OfferUsage:
        """Insert a usage row; raises ``IntegrityError`` on a duplicate."""

    @abstractmethod
    def increment_used_count(self, offer_id: UUID) -> None:
        """Atomically add exactly one to ``used_count``."""

    @abstractmethod
    def delete(self, id: str) -> bool:
        """Hard-delete an offer that was never redeemed."""
