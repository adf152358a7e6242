"""Discount calculation.

Pure: no database access, no clock.  Amounts are ``Decimal`` and the
result is rounded to the currency's minor unit with ROUND_HALF_UP.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Union

from modules.offers.constants import MONEY_QUANTUM, DiscountType

if TYPE_CHECKING:
    from modules.offers.models import Offer

Number = Union[Decimal, int, str]


def to_money(value: Number) -> Decimal:
    """Quantize *value* to two decimal places, rounding half up."""
    return Decimal(str(value)).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


class DiscountCalculator:
    """Offer + order subtotal -> discount amount."""

    @staticmethod
    def compute(offer: Offer, subtotal: Number) -> Decimal:
        subtotal = Decimal(str(subtotal))
        value = Decimal(str(offer.discount_value))

        if offer.discount_type == DiscountType.PERCENTAGE:
            discount = subtotal * value / Decimal(100)
            if offer.max_discount is not None:
                discount = min(discount, Decimal(str(offer.max_discount)))
        elif offer.discount_type == DiscountType.FIXED:
            # never more than the subtotal, so totals cannot go negative
            discount = min(value, subtotal)
        else:
            raise ValueError(f"Unknown discount type: {offer.discount_type!r}")

        return to_money(max(discount, Decimal(0)))
