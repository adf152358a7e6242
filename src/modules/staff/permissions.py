"""DRF permission classes backed by the worker directory."""

from __future__ import annotations

from rest_framework.permissions import BasePermission

from modules.core.exceptions import Forbidden
from modules.staff.actor import actor_from_user


class IsStaffMember(BasePermission):
    """Allow authenticated users that resolve to an ``Actor``.

    The resolved actor is cached on ``request.actor`` for the view.
    """

    message = "Staff access required."

    def has_permission(self, request, view) -> bool:
        if not request.user or not request.user.is_authenticated:
            return False
        try:
            request.actor = actor_from_user(request.user)
        except Forbidden:
            return False
        return True
