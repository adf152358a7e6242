"""Offer and OfferUsage models.

Business rules implemented here:
- ``code`` is optional, unique and stored trimmed + uppercased; offers
  without a code are only reachable through the eligible-offers listing.
- ``used_count`` only ever grows (``F()`` increments in the repository).
- ``OfferUsage`` is append-only and is the sole enforcement mechanism for
  ``one_time_per_user``: conditional unique constraints on
  ``(offer, customer_id)`` and ``(offer, customer_email)`` turn a second
  redemption by the same customer into an ``IntegrityError``.
- The four audience fields are the legacy wire format; domain logic reads
  them only through ``modules.offers.audience.Audience``.
"""

from __future__ import annotations

from typing import Any, Optional

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.offers.constants import OFFER_CODE_MAX_LENGTH, DiscountType


def normalize_offer_code(code: Optional[str]) -> Optional[str]:
    """Trim and uppercase a redemption code; blank codes become ``None``."""
    if code is None:
        return None
    normalized = code.strip().upper()
    return normalized or None


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class Offer(BaseModel):
    code = models.CharField(
        max_length=OFFER_CODE_MAX_LENGTH,
        unique=True,
        null=True,
        blank=True,
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    discount_type = models.CharField(max_length=20, choices=DiscountType.choices)
    discount_value = models.DecimalField(max_digits=12, decimal_places=2)
    max_discount = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    min_order_amount = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True
    )
    valid_from = models.DateTimeField(default=timezone.now)
    valid_until = models.DateTimeField()
    is_active = models.BooleanField(default=True)

    # Audience (legacy wire format, see audience_for)
    customer_email = models.EmailField(blank=True, default="")
    customer_emails = models.JSONField(default=list, blank=True)
    customer_id = models.CharField(max_length=128, blank=True, default="")
    customer_ids = models.JSONField(default=list, blank=True)

    usage_limit = models.PositiveIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1)]
    )
    used_count = models.PositiveIntegerField(default=0)
    one_time_per_user = models.BooleanField(default=False)
    created_by = models.CharField(max_length=150, blank=True, default="")

    class Meta:
        db_table = "offers"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["is_active", "valid_until"], name="offers_active_until_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(discount_value__gt=0),
                name="offers_discount_value_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(valid_from__lte=models.F("valid_until")),
                name="offers_valid_window_ordered",
            ),
        ]

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.code = normalize_offer_code(self.code)
        self.customer_email = normalize_email(self.customer_email)
        self.customer_emails = [
            normalize_email(e) for e in (self.customer_emails or []) if normalize_email(e)
        ]
        self.customer_ids = [str(i) for i in (self.customer_ids or []) if str(i).strip()]
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.code or self.title} ({self.discount_type} {self.discount_value})"


class OfferUsage(BaseModel):
    """One redemption of a ``one_time_per_user`` offer by one customer."""

    offer = models.ForeignKey(
        "offers.Offer",
        on_delete=models.PROTECT,
        related_name="usages",
    )
    customer_id = models.CharField(max_length=128, blank=True, default="")
    customer_email = models.EmailField(blank=True, default="")
    used_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "offer_usages"
        ordering = ["-used_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["offer", "customer_id"],
                condition=~models.Q(customer_id=""),
                name="offer_usage_unique_customer_id",
            ),
            models.UniqueConstraint(
                fields=["offer", "customer_email"],
                condition=~models.Q(customer_email=""),
                name="offer_usage_unique_customer_email",
            ),
            models.CheckConstraint(
                condition=~models.Q(customer_id="", customer_email=""),
                name="offer_usage_has_customer",
            ),
        ]

    def __str__(self) -> str:
        who = self.customer_id or self.customer_email
        return f"{self.offer_id} used by {who}"
