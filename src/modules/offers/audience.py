"""Offer audience targeting.

Offers are stored with four overlapping legacy fields (``customer_email``,
``customer_emails``, ``customer_id``, ``customer_ids``).  They are
collapsed here into a single value::

    Audience = AllCustomers | Customers(frozenset[CustomerRef])
    CustomerRef = CustomerId | CustomerEmail

so eligibility has exactly one matching function, ``Audience.admits``.
A customer qualifies when *any* of their references is in the set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, FrozenSet, Optional, Union

if TYPE_CHECKING:
    from modules.offers.models import Offer


def _normalize_email(value: Optional[str]) -> str:
    return (value or "").strip().lower()


def _normalize_id(value: Optional[str]) -> str:
    return str(value or "").strip()


@dataclass(frozen=True)
class CustomerId:
    value: str


@dataclass(frozen=True)
class CustomerEmail:
    value: str


CustomerRef = Union[CustomerId, CustomerEmail]


@dataclass(frozen=True)
class CustomerIdentity:
    """The customer a discount is being evaluated for.

    Either field may be missing (e.g. an anonymous visitor browsing the
    offers list), in which case scoped offers never admit them.
    """

    id: Optional[str] = None
    email: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "id", _normalize_id(self.id) or None)
        object.__setattr__(self, "email", _normalize_email(self.email) or None)

    @property
    def is_anonymous(self) -> bool:
        return self.id is None and self.email is None

    @property
    def refs(self) -> FrozenSet[CustomerRef]:
        refs: set[CustomerRef] = set()
        if self.id:
            refs.add(CustomerId(self.id))
        if self.email:
            refs.add(CustomerEmail(self.email))
        return frozenset(refs)


@dataclass(frozen=True)
class AllCustomers:
    def admits(self, customer: CustomerIdentity) -> bool:
        return True


@dataclass(frozen=True)
class Customers:
    refs: FrozenSet[CustomerRef]

    def admits(self, customer: CustomerIdentity) -> bool:
        return not self.refs.isdisjoint(customer.refs)


Audience = Union[AllCustomers, Customers]


def audience_for(offer: Offer) -> Audience:
    """Build the ``Audience`` of *offer* from its legacy fields."""
    refs: set[CustomerRef] = set()

    for email in [offer.customer_email, *(offer.customer_emails or [])]:
        if _normalize_email(email):
            refs.add(CustomerEmail(_normalize_email(email)))
    for customer_id in [offer.customer_id, *(offer.customer_ids or [])]:
        if _normalize_id(customer_id):
            refs.add(CustomerId(_normalize_id(customer_id)))

    if not refs:
        return AllCustomers()
    return Customers(frozenset(refs))
