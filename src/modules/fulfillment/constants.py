"""Fulfillment domain constants."""

from django.db import models


class TaskType(models.TextChoices):
    PACKING = "packing", "Packing"
    QUALITY_CHECK = "quality_check", "Quality check"
    SHIPPING_PREP = "shipping_prep", "Shipping preparation"


class TaskStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    IN_PROGRESS = "in_progress", "In progress"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class TaskPriority(models.TextChoices):
    LOW = "low", "Low"
    MEDIUM = "medium", "Medium"
    HIGH = "high", "High"
