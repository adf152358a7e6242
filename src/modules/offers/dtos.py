"""Offer DTOs for the Service Layer.

Framework-agnostic pydantic v2 contracts between the DRF views and the
offer services.  All DTOs are immutable (``frozen=True``).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.offers.audience import CustomerIdentity
from modules.offers.constants import DiscountType

if TYPE_CHECKING:
    from modules.offers.models import Offer


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


class CustomerRefDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    customer_id: Optional[str] = None
    customer_email: Optional[str] = None

    def to_identity(self) -> CustomerIdentity:
        return CustomerIdentity(id=self.customer_id, email=self.customer_email)


class ValidateOfferDTO(CustomerRefDTO):
    """Manual code entry at checkout: ``offer_code`` or ``offer_id``."""

    offer_code: Optional[str] = None
    offer_id: Optional[str] = None
    subtotal: Decimal = Field(ge=0)

    @model_validator(mode="after")
    def code_or_id_required(self):
        if not (self.offer_code or "").strip() and not (self.offer_id or "").strip():
            raise ValueError("Offer ID or code is required.")
        return self

    @property
    def lookup(self) -> str:
        return (self.offer_id or self.offer_code or "").strip()


class EligibleOffersQueryDTO(CustomerRefDTO):
    subtotal: Decimal = Field(default=Decimal("0"), ge=0)


@dataclass(frozen=True)
class ValidatedOffer:
    """A successfully validated offer and the discount it grants."""

    offer: Offer
    discount: Decimal


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------


class OfferFieldsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_discount: Optional[Decimal] = Field(default=None, gt=0)
    min_order_amount: Optional[Decimal] = Field(default=None, ge=0)
    customer_email: Optional[str] = None
    customer_emails: Optional[List[str]] = None
    customer_id: Optional[str] = None
    customer_ids: Optional[List[str]] = None
    usage_limit: Optional[int] = Field(default=None, ge=1)


class CreateOfferDTO(OfferFieldsDTO):
    code: Optional[str] = None
    title: str = Field(min_length=1)
    description: str = ""
    discount_type: DiscountType
    discount_value: Decimal = Field(gt=0)
    valid_from: datetime
    valid_until: datetime
    is_active: bool = True
    one_time_per_user: bool = False

    @model_validator(mode="after")
    def validate_offer(self):
        if self.valid_from > self.valid_until:
            raise ValueError("valid_from must not be after valid_until.")
        if (
            self.discount_type == DiscountType.PERCENTAGE
            and self.discount_value > 100
        ):
            raise ValueError("A percentage discount cannot exceed 100.")
        return self


class UpdateOfferDTO(OfferFieldsDTO):
    """Partial update: omitted fields stay unchanged; an explicit ``None``
    clears an optional field (code, limits, audience) and is ignored elsewhere.
    """

    code: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = Field(default=None, gt=0)
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    is_active: Optional[bool] = None
    one_time_per_user: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Title cannot be blank.")
        return v
