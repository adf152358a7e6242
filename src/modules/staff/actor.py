"""The ``Actor`` value: who is calling a staff operation.

Services receive an ``Actor`` instead of a request or a user model so
authorization rules stay testable without HTTP.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from modules.core.exceptions import Forbidden
from modules.staff.constants import ELEVATED_ROLES, StaffRole


@dataclass(frozen=True)
class Actor:
    id: str
    role: str

    @property
    def is_elevated(self) -> bool:
        return self.role in ELEVATED_ROLES


def actor_from_user(user: Any) -> Actor:
    """Resolve an authenticated Django user into an ``Actor``.

    Users linked to an active ``StaffMember`` act with that member's role.
    Django superusers without a directory entry act as ``superadmin``.

    Raises:
        Forbidden: the user is anonymous, not staff, or deactivated.
    """
    if user is None or not getattr(user, "is_authenticated", False):
        raise Forbidden("Staff authentication required.")

    profile = getattr(user, "staff_profile", None)
    if profile is not None:
        if not profile.is_active:
            raise Forbidden("Staff account is deactivated.")
        return Actor(id=profile.username, role=profile.role)

    if getattr(user, "is_superuser", False):
        return Actor(id=user.get_username(), role=StaffRole.SUPERADMIN)

    raise Forbidden("Staff access required.")
