"""Order and OrderNumberSequence models.

Business rules implemented here:
- ``order_number`` (``ORD-<year>-<NNNNNN>``) is assigned exactly once, at
  creation, from the per-year ``OrderNumberSequence`` counter row.
- ``total`` is always ``max(0, subtotal + shipping - discount)``; it is
  recomputed on every ``save()`` and guarded by check constraints.
- ``offer`` and ``discount`` are frozen at creation and never recomputed
  from the live offer.
- Status, assignment and refund writes go through conditional
  ``UPDATE`` statements in the repository, never through ``save()`` on a
  possibly stale instance.
- Orders are never deleted.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from modules.core.models import BaseModel
from modules.orders.constants import (
    ONLINE_PAYMENT_METHODS,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    RefundStatus,
)

ZERO = Decimal("0.00")


def compute_total(subtotal: Decimal, shipping: Decimal, discount: Decimal | None) -> Decimal:
    """``max(0, subtotal + shipping - discount)``."""
    total = Decimal(subtotal) + Decimal(shipping) - Decimal(discount or 0)
    return max(total, ZERO)


class Order(BaseModel):
    """Order aggregate root.

    The UUIDv7 ``id`` is used for internal references; ``order_number``
    is the human-facing identifier and is also accepted by the API.

    ``idempotency_key`` is nullable: only orders created with an
    ``Idempotency-Key`` header carry one.
    """

    order_number: models.CharField = models.CharField(
        max_length=32, unique=True, editable=False
    )
    items: models.JSONField = models.JSONField(default=list)

    subtotal: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(0)]
    )
    shipping: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=ZERO,
        validators=[MinValueValidator(0)],
    )
    discount: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    total: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=ZERO, editable=False
    )

    # Customer snapshot
    customer_name: models.CharField = models.CharField(max_length=255)
    customer_email: models.EmailField = models.EmailField(max_length=254)
    customer_phone: models.CharField = models.CharField(
        max_length=32, blank=True, default=""
    )
    user_id: models.CharField = models.CharField(
        max_length=128, blank=True, default=""
    )
    shipping_address: models.JSONField = models.JSONField(default=dict)

    payment_method: models.CharField = models.CharField(
        max_length=20, choices=PaymentMethod.choices
    )
    payment_status: models.CharField = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    payment_reference: models.CharField = models.CharField(
        max_length=255, blank=True, default=""
    )

    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    assigned_to: models.CharField = models.CharField(
        max_length=150, null=True, blank=True
    )

    offer: models.ForeignKey = models.ForeignKey(
        "offers.Offer",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
    )

    refund_status: models.CharField = models.CharField(
        max_length=20, choices=RefundStatus.choices, null=True, blank=True
    )
    refund_reference: models.CharField = models.CharField(
        max_length=255, blank=True, default=""
    )
    refund_notes: models.TextField = models.TextField(blank=True, default="")

    tracking_number: models.CharField = models.CharField(
        max_length=100, blank=True, default=""
    )
    courier_company: models.CharField = models.CharField(
        max_length=100, blank=True, default=""
    )
    notes: models.TextField = models.TextField(blank=True, default="")
    idempotency_key: models.CharField = models.CharField(
        max_length=255,
        unique=True,
        null=True,
        blank=True,
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["assigned_to"], name="orders_assigned_idx"),
            models.Index(fields=["customer_email"], name="orders_customer_email_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(subtotal__gte=0), name="orders_subtotal_non_negative"
            ),
            models.CheckConstraint(
                condition=Q(shipping__gte=0), name="orders_shipping_non_negative"
            ),
            models.CheckConstraint(
                condition=Q(discount__isnull=True) | Q(discount__gte=0),
                name="orders_discount_non_negative",
            ),
            models.CheckConstraint(
                condition=Q(total__gte=0), name="orders_total_non_negative"
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    @property
    def refund_eligible(self) -> bool:
        """Cancelled after an online payment went through."""
        return (
            self.status == OrderStatus.CANCELLED
            and self.payment_status == PaymentStatus.PAID
            and self.payment_method in ONLINE_PAYMENT_METHODS
        )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        self.total = compute_total(self.subtotal, self.shipping, self.discount)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "total" not in update_fields:
            kwargs["update_fields"] = list(update_fields) + ["total"]
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderNumberSequence(models.Model):
    """Per-year counter behind ``Order.order_number``.

    Incremented with a single ``UPDATE ... SET last_value = last_value + 1``
    inside the order-creation transaction, so concurrent checkouts never
    draw the same number.
    """

    year: models.PositiveIntegerField = models.PositiveIntegerField(primary_key=True)
    last_value: models.PositiveIntegerField = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "order_number_sequences"

    def __str__(self) -> str:
        return f"{self.year}: {self.last_value}"
