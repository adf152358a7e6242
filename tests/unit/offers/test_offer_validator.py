"""Unit tests for OfferValidator and UsageTracker.

Covers:
- Lookup by code (case-insensitive) and by UUID.
- Each failure reason, and that the first failing check wins.
- Eligible-offers listing uses the same checks as manual entry.
- Usage recording and per-customer enforcement.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from modules.offers.audience import CustomerIdentity
from modules.offers.constants import DiscountType
from modules.offers.exceptions import (
    AlreadyUsedByCustomer,
    MinOrderNotMet,
    NotEligible,
    OfferExpired,
    OfferInactive,
    OfferNotFound,
    UsageLimitReached,
)
from modules.offers.models import Offer, OfferUsage
from modules.offers.repositories.django_repository import OfferDjangoRepository
from modules.offers.services import OfferValidator, UsageTracker

pytestmark = pytest.mark.unit

ANANYA = CustomerIdentity(id="u-100", email="ananya@example.com")


@pytest.fixture()
def validator():
    return OfferValidator(OfferDjangoRepository())


@pytest.fixture()
def tracker():
    return UsageTracker(OfferDjangoRepository())


class TestValidate:
    def test_valid_code_returns_discount(self, validator, make_offer):
        offer = make_offer()
        result = validator.validate("save10", Decimal("1200"), ANANYA)
        assert result.offer.id == offer.id
        assert result.discount == Decimal("120.00")

    def test_lookup_by_offer_id(self, validator, make_offer):
        offer = make_offer(code=None, title="Hidden offer")
        result = validator.validate(str(offer.id), Decimal("500"), ANANYA)
        assert result.offer.id == offer.id

    def test_unknown_code(self, validator):
        with pytest.raises(OfferNotFound):
            validator.validate("NOPE", Decimal("100"), ANANYA)

    def test_inactive(self, validator, make_offer):
        make_offer(is_active=False)
        with pytest.raises(OfferInactive):
            validator.validate("SAVE10", Decimal("100"), ANANYA)

    def test_expired(self, validator, make_offer):
        now = timezone.now()
        make_offer(valid_from=now - timedelta(days=10), valid_until=now - timedelta(days=1))
        with pytest.raises(OfferExpired):
            validator.validate("SAVE10", Decimal("100"), ANANYA)

    def test_not_yet_valid(self, validator, make_offer):
        now = timezone.now()
        make_offer(valid_from=now + timedelta(days=1), valid_until=now + timedelta(days=5))
        with pytest.raises(OfferExpired):
            validator.validate("SAVE10", Decimal("100"), ANANYA)

    def test_minimum_not_met(self, validator, make_offer):
        make_offer(min_order_amount=Decimal("999"))
        with pytest.raises(MinOrderNotMet) as exc_info:
            validator.validate("SAVE10", Decimal("998.99"), ANANYA)
        assert exc_info.value.code == "min_order_not_met"

    def test_usage_limit_reached(self, validator, make_offer):
        make_offer(usage_limit=5, used_count=5)
        with pytest.raises(UsageLimitReached):
            validator.validate("SAVE10", Decimal("100"), ANANYA)

    def test_already_used_by_email(self, validator, make_offer):
        offer = make_offer(one_time_per_user=True)
        OfferUsage.objects.create(offer=offer, customer_email="ananya@example.com")
        with pytest.raises(AlreadyUsedByCustomer):
            validator.validate("SAVE10", Decimal("100"), CustomerIdentity(email="ANANYA@example.com"))

    def test_not_in_audience(self, validator, make_offer):
        make_offer(customer_emails=["vip@example.com"])
        with pytest.raises(NotEligible):
            validator.validate("SAVE10", Decimal("100"), ANANYA)

    def test_first_failing_check_wins(self, validator, make_offer):
        now = timezone.now()
        make_offer(
            is_active=False,
            valid_from=now - timedelta(days=2),
            valid_until=now - timedelta(days=1),
            min_order_amount=Decimal("5000"),
            customer_emails=["vip@example.com"],
        )
        with pytest.raises(OfferInactive):
            validator.validate("SAVE10", Decimal("100"), ANANYA)

    def test_expiry_checked_before_minimum(self, validator, make_offer):
        now = timezone.now()
        make_offer(
            valid_from=now - timedelta(days=3),
            valid_until=now - timedelta(days=1),
            min_order_amount=Decimal("5000"),
        )
        with pytest.raises(OfferExpired):
            validator.validate("SAVE10", Decimal("100"), ANANYA)

    def test_validation_never_writes(self, validator, make_offer):
        offer = make_offer(one_time_per_user=True)
        validator.validate("SAVE10", Decimal("100"), ANANYA)
        offer.refresh_from_db()
        assert offer.used_count == 0
        assert not OfferUsage.objects.exists()


class TestEligibleOffers:
    def test_lists_only_applicable_offers_with_discount(self, validator, make_offer):
        make_offer(code="SAVE10")
        make_offer(
            code="FLAT100",
            discount_type=DiscountType.FIXED,
            discount_value=Decimal("100"),
            min_order_amount=Decimal("999"),
        )
        make_offer(code="VIPONLY", customer_emails=["vip@example.com"])
        make_offer(code="OFF", is_active=False)

        eligible = validator.get_eligible_offers(ANANYA, Decimal("500"))

        assert {(v.offer.code, v.discount) for v in eligible} == {
            ("SAVE10", Decimal("50.00")),
        }

    def test_listed_offer_always_validates(self, validator, make_offer):
        make_offer(code="SAVE10", one_time_per_user=True)
        for validated in validator.get_eligible_offers(ANANYA, Decimal("800")):
            again = validator.validate(validated.offer.code, Decimal("800"), ANANYA)
            assert again.discount == validated.discount

    def test_targeted_offer_listed_for_its_customer(self, validator, make_offer):
        make_offer(code="VIPONLY", customer_ids=["u-100"])
        codes = [v.offer.code for v in validator.get_eligible_offers(ANANYA, Decimal("100"))]
        assert codes == ["VIPONLY"]


class TestUsageTracker:
    def test_counts_usage(self, tracker, make_offer):
        offer = make_offer()
        tracker.record_usage(offer, ANANYA)
        tracker.record_usage(offer, CustomerIdentity(email="kabir@example.com"))
        offer.refresh_from_db()
        assert offer.used_count == 2
        # usage rows are only kept for one-time offers
        assert not OfferUsage.objects.exists()

    def test_one_time_offer_records_customer(self, tracker, make_offer):
        offer = make_offer(one_time_per_user=True)
        tracker.record_usage(offer, ANANYA)
        usage = OfferUsage.objects.get(offer=offer)
        assert usage.customer_id == "u-100"
        assert usage.customer_email == "ananya@example.com"

    def test_second_redemption_is_rejected(self, tracker, make_offer):
        offer = make_offer(one_time_per_user=True)
        tracker.record_usage(offer, ANANYA)
        with pytest.raises(AlreadyUsedByCustomer):
            tracker.record_usage(offer, CustomerIdentity(id="u-100"))
        offer.refresh_from_db()
        assert offer.used_count == 1
        assert OfferUsage.objects.filter(offer=offer).count() == 1


def test_code_is_normalized_on_save(make_offer):
    offer = make_offer(code="  summer25 ")
    assert offer.code == "SUMMER25"
    assert Offer.objects.filter(code="SUMMER25").exists()
