"""Staff roles.

``superadmin`` and ``admin`` are *elevated*: they bypass assignment
ownership checks and are the only roles allowed to assign orders, create
fulfillment tasks, manage offers and drive refunds.
"""

from django.db import models


class StaffRole(models.TextChoices):
    SUPERADMIN = "superadmin", "Super admin"
    ADMIN = "admin", "Admin"
    WORKER = "worker", "Worker"


ELEVATED_ROLES: frozenset[str] = frozenset({StaffRole.SUPERADMIN, StaffRole.ADMIN})
