"""Offer domain constants."""

from decimal import Decimal

from django.db import models


class DiscountType(models.TextChoices):
    PERCENTAGE = "percentage", "Percentage"
    FIXED = "fixed", "Fixed amount"


MONEY_QUANTUM = Decimal("0.01")

OFFER_CODE_MAX_LENGTH = 50
