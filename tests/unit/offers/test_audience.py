from __future__ import annotations

import pytest

from modules.offers.audience import (
    AllCustomers,
    CustomerEmail,
    CustomerId,
    CustomerIdentity,
    Customers,
    audience_for,
)
from modules.offers.models import Offer

pytestmark = pytest.mark.unit


def test_offer_without_targeting_admits_everyone():
    audience = audience_for(Offer())
    assert audience == AllCustomers()
    assert audience.admits(CustomerIdentity())
    assert audience.admits(CustomerIdentity(email="anyone@example.com"))


def test_legacy_fields_collapse_into_one_set():
    offer = Offer(
        customer_email=" VIP@Example.com ",
        customer_emails=["second@example.com", ""],
        customer_id="u-1",
        customer_ids=["u-2", " "],
    )
    audience = audience_for(offer)
    assert audience == Customers(
        frozenset(
            {
                CustomerEmail("vip@example.com"),
                CustomerEmail("second@example.com"),
                CustomerId("u-1"),
                CustomerId("u-2"),
            }
        )
    )


def test_email_match_is_case_insensitive():
    audience = audience_for(Offer(customer_emails=["vip@example.com"]))
    assert audience.admits(CustomerIdentity(email="VIP@EXAMPLE.COM"))


def test_any_reference_is_enough():
    audience = audience_for(Offer(customer_ids=["u-7"]))
    assert audience.admits(CustomerIdentity(id="u-7", email="other@example.com"))
    assert not audience.admits(CustomerIdentity(id="u-8", email="other@example.com"))


def test_scoped_offer_never_admits_anonymous():
    audience = audience_for(Offer(customer_email="vip@example.com"))
    assert not audience.admits(CustomerIdentity())


def test_identity_normalizes_blank_values():
    identity = CustomerIdentity(id="  ", email="  ")
    assert identity.is_anonymous
    assert identity.refs == frozenset()
