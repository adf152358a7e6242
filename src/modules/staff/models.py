"""Worker directory.

``username`` is the worker identity stored in ``Order.assigned_to`` and
``Task.assigned_to``.  The directory is read-only input for order
assignment; it is maintained through the Django admin or management
commands, not through this service's API.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel
from modules.staff.constants import ELEVATED_ROLES, StaffRole


class StaffMember(BaseModel):
    username = models.CharField(max_length=150, unique=True)
    name = models.CharField(max_length=255, blank=True, default="")
    email = models.EmailField(max_length=254, blank=True, default="")
    role = models.CharField(
        max_length=20,
        choices=StaffRole.choices,
        default=StaffRole.WORKER,
    )
    is_active = models.BooleanField(default=True)
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="staff_profile",
    )

    class Meta:
        db_table = "staff_members"
        ordering = ["username"]
        indexes = [
            models.Index(fields=["role", "is_active"], name="staff_role_active_idx"),
        ]

    @property
    def is_elevated(self) -> bool:
        return self.role in ELEVATED_ROLES

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"
