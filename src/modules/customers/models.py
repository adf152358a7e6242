"""Customer reporting profile.

A denormalized view of who ordered what, keyed by ``email``.  Profiles
are written only by the asynchronous ``sync_customer_profile`` task after
an order commits; nothing in the order flow reads them.

Phone and email are personal data: ``__str__`` masks the email and the
logging pipeline masks both.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from modules.core.models import BaseModel


class Customer(BaseModel):
    email = models.EmailField(max_length=254, unique=True)
    name = models.CharField(max_length=255, blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="")
    user_id = models.CharField(max_length=128, blank=True, default="")
    total_orders = models.PositiveIntegerField(default=0)
    total_spent = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    last_order_date = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "customers"
        ordering = ["-last_order_date"]
        indexes = [
            models.Index(fields=["-last_order_date"], name="customers_last_order_idx"),
            models.Index(fields=["user_id"], name="customers_user_idx"),
        ]

    def __str__(self) -> str:
        local, _, domain = self.email.partition("@")
        return f"{self.name or '?'} ({local[:1]}***@{domain})"
