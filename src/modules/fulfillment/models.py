"""Fulfillment Task model.

A task is one step of the fixed packing -> quality_check -> shipping_prep
workflow, bound to exactly one order.  Each step type occurs at most once
per order (unique ``(order, type)``); a failed step is reopened by
resetting its status, never by creating a second task.
"""

from __future__ import annotations

from django.db import models

from modules.core.models import BaseModel
from modules.fulfillment.constants import TaskPriority, TaskStatus, TaskType


class Task(BaseModel):
    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="tasks",
    )
    order_number: models.CharField = models.CharField(max_length=32)
    type: models.CharField = models.CharField(max_length=20, choices=TaskType.choices)
    status: models.CharField = models.CharField(
        max_length=20,
        choices=TaskStatus.choices,
        default=TaskStatus.PENDING,
    )
    assigned_to: models.CharField = models.CharField(max_length=150)
    assigned_by: models.CharField = models.CharField(max_length=150)
    priority: models.CharField = models.CharField(
        max_length=10,
        choices=TaskPriority.choices,
        default=TaskPriority.MEDIUM,
    )
    notes: models.TextField = models.TextField(blank=True, default="")
    completed_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "fulfillment_tasks"
        ordering = ["created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "type"], name="fulfillment_task_order_type_unique"
            ),
        ]
        indexes = [
            models.Index(fields=["assigned_to", "status"], name="task_assignee_status_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.order_number}:{self.type} ({self.status})"
