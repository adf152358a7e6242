"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``OrderItemDTO``: one line-item snapshot.
- ``CustomerDTO`` / ``ShippingAddressDTO``: checkout snapshots.
- ``CreateOrderDTO``: input for order creation.
- ``RefundUpdateDTO``: input for the refund sub-flow.
- ``OrderDetailsUpdateDTO``: shipping details and notes.
- ``RefundDetailsDTO``: output of the refund view.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.offers.calculator import to_money
from modules.orders.constants import ONLINE_PAYMENT_METHODS, PaymentMethod, RefundStatus

if TYPE_CHECKING:
    from modules.orders.models import Order


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class OrderItemDTO(BaseModel):
    """Line item as sold; prices are a snapshot, not a catalog reference."""

    model_config = ConfigDict(frozen=True)

    product_id: str = Field(min_length=1)
    sku: str = ""
    title: str = Field(min_length=1)
    quantity: int = Field(ge=1)
    price: Decimal = Field(ge=0)

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    def snapshot(self) -> dict:
        return {
            "product_id": self.product_id,
            "sku": self.sku or self.product_id,
            "title": self.title,
            "quantity": self.quantity,
            "price": str(to_money(self.price)),
        }


class CustomerDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    email: str = Field(min_length=3)
    phone: str = ""
    user_id: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("A valid email is required.")
        return v


class ShippingAddressDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    address_line1: str = Field(min_length=1)
    address_line2: Optional[str] = None
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    pincode: str = Field(min_length=1)
    country: str = "India"

    def snapshot(self) -> dict:
        return self.model_dump(exclude_none=True)


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``items`` must contain at least one item.
    - ``subtotal``, when sent, must equal the sum of the line items.
    - online payments (razorpay, upi) require ``payment_confirmed``.
    """

    model_config = ConfigDict(frozen=True)

    items: List[OrderItemDTO]
    subtotal: Optional[Decimal] = Field(default=None, ge=0)
    shipping: Decimal = Field(default=Decimal("0"), ge=0)
    customer: CustomerDTO
    shipping_address: ShippingAddressDTO
    payment_method: PaymentMethod = PaymentMethod.COD
    payment_confirmed: bool = False
    payment_reference: str = ""
    offer_code: Optional[str] = None
    notes: str = ""
    idempotency_key: Optional[str] = None

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(cls, v: List[OrderItemDTO]) -> List[OrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @model_validator(mode="after")
    def validate_order(self):
        if self.subtotal is not None and to_money(self.subtotal) != self.items_subtotal:
            raise ValueError("Subtotal does not match the order items.")
        if self.payment_method in ONLINE_PAYMENT_METHODS and not self.payment_confirmed:
            raise ValueError("Online payments must be confirmed before ordering.")
        return self

    @property
    def items_subtotal(self) -> Decimal:
        return to_money(sum((item.line_total for item in self.items), Decimal("0")))

    @property
    def is_prepaid(self) -> bool:
        return self.payment_method in ONLINE_PAYMENT_METHODS and self.payment_confirmed


class RefundUpdateDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    refund_status: RefundStatus
    refund_reference: Optional[str] = None
    notes: Optional[str] = None


class OrderDetailsUpdateDTO(BaseModel):
    """Partial update: ``None`` means "leave unchanged"."""

    model_config = ConfigDict(frozen=True)

    tracking_number: Optional[str] = None
    courier_company: Optional[str] = None
    notes: Optional[str] = None


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class RefundDetailsDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: str
    order_number: str
    status: str
    payment_method: str
    payment_status: str
    payment_reference: str
    total: Decimal
    refund_status: Optional[str]
    refund_reference: str
    refund_notes: str
    can_refund: bool

    @classmethod
    def from_entity(cls, order: Order) -> RefundDetailsDTO:
        return cls(
            order_id=str(order.id),
            order_number=order.order_number,
            status=order.status,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            payment_reference=order.payment_reference,
            total=order.total,
            refund_status=order.refund_status,
            refund_reference=order.refund_reference,
            refund_notes=order.refund_notes,
            can_refund=order.refund_eligible,
        )
