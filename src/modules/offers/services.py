"""Offer service layer.

- ``OfferValidator``: read-only eligibility checks + discount computation,
  shared by manual code entry and the eligible-offers listing so an offer
  shown as applicable never fails when applied.
- ``UsageTracker``: records a redemption exactly once per created order.
- ``OfferService``: offer administration (elevated staff only).

Check order (the first failing check wins):

1. lookup -> ``OfferNotFound``
2. ``is_active`` -> ``OfferInactive``
3. validity window -> ``OfferExpired``
4. minimum order -> ``MinOrderNotMet``
5. global usage limit -> ``UsageLimitReached``
6. per-customer usage -> ``AlreadyUsedByCustomer``
7. audience -> ``NotEligible``
"""

from __future__ import annotations

from copy import copy
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

import structlog
from django.db import IntegrityError, transaction
from django.db.models import ProtectedError
from django.utils import timezone

from modules.core.exceptions import Forbidden
from modules.offers.audience import CustomerIdentity, audience_for
from modules.offers.calculator import DiscountCalculator
from modules.offers.constants import DiscountType
from modules.offers.dtos import ValidatedOffer
from modules.offers.exceptions import (
    AlreadyUsedByCustomer,
    DuplicateOfferCode,
    InvalidOffer,
    MinOrderNotMet,
    NotEligible,
    OfferExpired,
    OfferInactive,
    OfferInUse,
    OfferNotFound,
    UsageLimitReached,
)
from modules.offers.models import Offer, normalize_offer_code

if TYPE_CHECKING:
    from modules.offers.dtos import CreateOfferDTO, UpdateOfferDTO
    from modules.offers.repositories.interfaces import IOfferRepository
    from modules.staff.actor import Actor

logger = structlog.get_logger(__name__)

# Optional offer fields an explicit null clears, and the value stored instead.
CLEARABLE_FIELDS = {
    "code": None,
    "max_discount": None,
    "min_order_amount": None,
    "usage_limit": None,
    "customer_email": "",
    "customer_id": "",
    "customer_emails": [],
    "customer_ids": [],
}


def _parse_uuid(value: str) -> Optional[UUID]:
    try:
        return UUID(value)
    except (TypeError, ValueError):
        return None


class OfferValidator:
    """Eligibility checks for offers.  Performs no writes."""

    def __init__(
        self,
        offer_repository: IOfferRepository,
        calculator: Optional[DiscountCalculator] = None,
    ) -> None:
        self._store = offer_repository
        self._calculator = calculator or DiscountCalculator()

    def validate(
        self,
        code_or_offer_id: str,
        subtotal: Decimal,
        customer: CustomerIdentity,
        now: Optional[datetime] = None,
    ) -> ValidatedOffer:
        """Validate an offer for a checkout and compute its discount.

        Raises:
            OfferNotFound, OfferInactive, OfferExpired, MinOrderNotMet,
            UsageLimitReached, AlreadyUsedByCustomer, NotEligible.
        """
        offer = self._lookup(code_or_offer_id)
        log = logger.bind(offer_id=str(offer.id), customer_id=customer.id)
        try:
            self.check_eligibility(offer, subtotal, customer, now)
        except (
            OfferInactive,
            OfferExpired,
            MinOrderNotMet,
            UsageLimitReached,
            AlreadyUsedByCustomer,
            NotEligible,
        ) as exc:
            log.info("offer.validation_failed", reason=exc.code)
            raise

        discount = self._calculator.compute(offer, subtotal)
        log.info("offer.validated", discount=str(discount))
        return ValidatedOffer(offer=offer, discount=discount)

    def get_eligible_offers(
        self,
        customer: CustomerIdentity,
        subtotal: Decimal,
        now: Optional[datetime] = None,
    ) -> List[ValidatedOffer]:
        """Every offer the customer could apply right now, with its discount."""
        now = now or timezone.now()
        eligible: List[ValidatedOffer] = []
        for offer in self._store.list({"is_active": True}):
            if not self.is_eligible(offer, subtotal, customer, now):
                continue
            eligible.append(
                ValidatedOffer(
                    offer=offer,
                    discount=self._calculator.compute(offer, subtotal),
                )
            )
        logger.info(
            "offer.eligible_listed",
            customer_id=customer.id,
            count=len(eligible),
        )
        return eligible

    def is_eligible(
        self,
        offer: Offer,
        subtotal: Decimal,
        customer: CustomerIdentity,
        now: Optional[datetime] = None,
    ) -> bool:
        try:
            self.check_eligibility(offer, subtotal, customer, now)
        except (
            OfferInactive,
            OfferExpired,
            MinOrderNotMet,
            UsageLimitReached,
            AlreadyUsedByCustomer,
            NotEligible,
        ):
            return False
        return True

    def check_eligibility(
        self,
        offer: Offer,
        subtotal: Decimal,
        customer: CustomerIdentity,
        now: Optional[datetime] = None,
    ) -> None:
        now = now or timezone.now()
        subtotal = Decimal(str(subtotal))

        if not offer.is_active:
            raise OfferInactive()

        if now < offer.valid_from or now > offer.valid_until:
            raise OfferExpired()

        if offer.min_order_amount is not None and subtotal < offer.min_order_amount:
            raise MinOrderNotMet(
                f"Minimum order amount of {offer.min_order_amount} required.",
                min_order_amount=str(offer.min_order_amount),
            )

        if offer.usage_limit is not None and offer.used_count >= offer.usage_limit:
            raise UsageLimitReached()

        if (
            offer.one_time_per_user
            and not customer.is_anonymous
            and self._store.has_usage(offer.id, customer)
        ):
            raise AlreadyUsedByCustomer()

        if not audience_for(offer).admits(customer):
            raise NotEligible()

    def _lookup(self, code_or_offer_id: str) -> Offer:
        value = (code_or_offer_id or "").strip()
        offer = None
        offer_id = _parse_uuid(value)
        if offer_id is not None:
            offer = self._store.get_by_id(str(offer_id))
        if offer is None and value:
            offer = self._store.get_by_code(value)
        if offer is None:
            logger.info("offer.not_found", lookup=value)
            raise OfferNotFound()
        return offer


class UsageTracker:
    """Records offer redemptions.

    Must run inside the transaction that creates the order, after the
    order row is written: abandoned checkouts never consume usage, and a
    rolled-back order rolls its usage back with it.

    ``used_count`` is incremented without re-checking ``usage_limit``;
    concurrent checkouts of a nearly exhausted offer may overshoot the
    limit by at most (concurrent checkouts - 1).  The per-customer check
    is strict because the ``OfferUsage`` insert is uniqueness-constrained.
    """

    def __init__(self, offer_repository: IOfferRepository) -> None:
        self._store = offer_repository

    @transaction.atomic
    def record_usage(self, offer: Offer, customer: CustomerIdentity) -> None:
        """Count one redemption of *offer* by *customer*.

        Raises:
            AlreadyUsedByCustomer: a usage row for this customer exists.
        """
        log = logger.bind(offer_id=str(offer.id), customer_id=customer.id)

        if offer.one_time_per_user:
            try:
                with transaction.atomic():
                    self._store.insert_usage(offer.id, customer)
            except IntegrityError as exc:
                log.warning("offer.duplicate_redemption")
                raise AlreadyUsedByCustomer() from exc

        self._store.increment_used_count(offer.id)
        log.info("offer.usage_counted")


class OfferService:
    """Offer administration.  Only elevated staff may mutate offers."""

    def __init__(self, offer_repository: IOfferRepository) -> None:
        self._repo = offer_repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_offer(self, dto: CreateOfferDTO, actor: Actor) -> Offer:
        self._require_elevated(actor)
        code = normalize_offer_code(dto.code)
        if code and self._repo.get_by_code(code):
            raise DuplicateOfferCode()

        offer = Offer(
            code=code,
            title=dto.title,
            description=dto.description,
            discount_type=dto.discount_type,
            discount_value=dto.discount_value,
            max_discount=dto.max_discount,
            min_order_amount=dto.min_order_amount,
            valid_from=dto.valid_from,
            valid_until=dto.valid_until,
            is_active=dto.is_active,
            customer_email=dto.customer_email or "",
            customer_emails=dto.customer_emails or [],
            customer_id=dto.customer_id or "",
            customer_ids=dto.customer_ids or [],
            usage_limit=dto.usage_limit,
            one_time_per_user=dto.one_time_per_user,
            created_by=actor.id,
        )
        offer = self._save(offer)
        logger.info("offer.created", offer_id=str(offer.id), actor_id=actor.id)
        return offer

    @transaction.atomic
    def update_offer(self, offer_id: str, dto: UpdateOfferDTO, actor: Actor) -> Offer:
        self._require_elevated(actor)
        offer = self.get_offer(offer_id)

        changes = {}
        for field, value in dto.model_dump(exclude_unset=True).items():
            if value is None:
                if field not in CLEARABLE_FIELDS:
                    continue
                value = copy(CLEARABLE_FIELDS[field])
            changes[field] = value

        if "code" in changes:
            code = normalize_offer_code(changes["code"])
            existing = self._repo.get_by_code(code) if code else None
            if existing is not None and existing.id != offer.id:
                raise DuplicateOfferCode()
            changes["code"] = code

        for field, value in changes.items():
            setattr(offer, field, value)

        if offer.valid_from > offer.valid_until:
            raise InvalidOffer("valid_from must not be after valid_until.")
        if offer.discount_type == DiscountType.PERCENTAGE and offer.discount_value > 100:
            raise InvalidOffer("A percentage discount cannot exceed 100.")

        offer = self._save(offer)
        logger.info(
            "offer.updated",
            offer_id=str(offer.id),
            actor_id=actor.id,
            fields=sorted(changes),
        )
        return offer

    @transaction.atomic
    def delete_offer(self, offer_id: str, actor: Actor) -> None:
        """Delete an offer that was never redeemed.

        Raises:
            OfferInUse: the offer was redeemed; deactivate it instead.
        """
        self._require_elevated(actor)
        offer = self.get_offer(offer_id)
        if offer.used_count > 0:
            raise OfferInUse()
        try:
            self._repo.delete(str(offer.id))
        except ProtectedError as exc:
            raise OfferInUse() from exc
        logger.info("offer.deleted_by_staff", offer_id=str(offer.id), actor_id=actor.id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_offer(self, offer_id: str) -> Offer:
        offer = self._repo.get_by_id(offer_id)
        if offer is None:
            raise OfferNotFound(f"Offer {offer_id} not found.")
        return offer

    def get_offer_for(self, offer_id: str, actor: Actor) -> Offer:
        self._require_elevated(actor)
        return self.get_offer(offer_id)

    def list_offers(self, actor: Actor) -> List[Offer]:
        self._require_elevated(actor)
        return self._repo.list()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _save(self, offer: Offer) -> Offer:
        try:
            with transaction.atomic():
                return self._repo.save(offer)
        except IntegrityError as exc:
            if offer.code and "code" in str(exc).lower():
                raise DuplicateOfferCode() from exc
            raise

    @staticmethod
    def _require_elevated(actor: Actor) -> None:
        if not actor.is_elevated:
            raise Forbidden("Only admins can manage offers.")
