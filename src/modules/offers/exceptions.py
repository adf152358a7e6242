"""Offer domain exceptions.

Every validation failure has its own type and code so the storefront can
tell the customer *why* a code did not apply (expired, minimum not met,
limit reached, already used) instead of a generic "invalid code".
"""

from __future__ import annotations

from rest_framework import status

from modules.core.exceptions import DomainError


class OfferNotFound(DomainError):
    code = "offer_not_found"
    http_status = status.HTTP_404_NOT_FOUND
    default_detail = "Offer not found."


class OfferInactive(DomainError):
    code = "offer_inactive"
    default_detail = "This offer is not active."


class OfferExpired(DomainError):
    code = "offer_expired"
    default_detail = "This offer has expired or is not yet valid."


class MinOrderNotMet(DomainError):
    code = "min_order_not_met"
    default_detail = "The order does not reach this offer's minimum amount."


class UsageLimitReached(DomainError):
    code = "usage_limit_reached"
    default_detail = "This offer has reached its usage limit."


class AlreadyUsedByCustomer(DomainError):
    code = "already_used_by_customer"
    default_detail = "You have already used this offer."


class NotEligible(DomainError):
    code = "not_eligible"
    http_status = status.HTTP_403_FORBIDDEN
    default_detail = "This offer is not available for your account."


class DuplicateOfferCode(DomainError):
    code = "duplicate_offer_code"
    http_status = status.HTTP_409_CONFLICT
    default_detail = "An offer with this code already exists."


class OfferInUse(DomainError):
    """The offer has been redeemed and is referenced by orders."""

    code = "offer_in_use"
    http_status = status.HTTP_409_CONFLICT
    default_detail = "This offer has been redeemed and can only be deactivated."


class InvalidOffer(DomainError):
    code = "invalid_offer"
    default_detail = "The offer definition is invalid."
