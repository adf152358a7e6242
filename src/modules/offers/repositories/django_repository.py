"""Django ORM implementation of the OfferStore."""

from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import F
from django.utils import timezone

from modules.core.repositories.interfaces import retry_read_once
from modules.offers.audience import CustomerIdentity
from modules.offers.models import Offer, OfferUsage, normalize_offer_code
from modules.offers.repositories.interfaces import IOfferRepository

logger = structlog.get_logger(__name__)


class OfferDjangoRepository(IOfferRepository):
    """Concrete OfferStore backed by Django ORM."""

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @retry_read_once
    def get_by_id(self, id: str) -> Optional[Offer]:
        try:
            return Offer.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    @retry_read_once
    def get_by_code(self, code: str) -> Optional[Offer]:
        normalized = normalize_offer_code(code)
        if not normalized:
            return None
        return Offer.objects.filter(code=normalized).first()

    @retry_read_once
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Offer]:
        queryset = Offer.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    @retry_read_once
    def has_usage(self, offer_id: UUID, customer: CustomerIdentity) -> bool:
        usages = OfferUsage.objects.filter(offer_id=offer_id)
        # id first: it is authoritative, emails can be shared across logins
        if customer.id and usages.filter(customer_id=customer.id).exists():
            return True
        if customer.email and usages.filter(customer_email=customer.email).exists():
            return True
        return False

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Offer) -> Offer:
        entity.save()
        logger.info("offer.saved", offer_id=str(entity.id), code=entity.code)
        return entity

    def insert_usage(self, offer_id: UUID, customer: CustomerIdentity) -> OfferUsage:
        if customer.is_anonymous:
            raise ValueError("Offer usage requires a customer id or email.")
        usage = OfferUsage.objects.create(
            offer_id=offer_id,
            customer_id=customer.id or "",
            customer_email=customer.email or "",
            used_at=timezone.now(),
        )
        logger.info(
            "offer.usage_recorded",
            offer_id=str(offer_id),
            customer_id=customer.id,
        )
        return usage

    def increment_used_count(self, offer_id: UUID) -> None:
        Offer.objects.filter(id=offer_id).update(
            used_count=F("used_count") + 1,
            updated_at=timezone.now(),
        )

    @transaction.atomic
    def delete(self, id: str) -> bool:
        deleted, _ = Offer.objects.filter(id=id).delete()
        if deleted:
            logger.info("offer.deleted", offer_id=str(id))
        return bool(deleted)
