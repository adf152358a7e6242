"""Django ORM implementation of the worker directory."""

from __future__ import annotations

from typing import List, Optional

from modules.core.repositories.interfaces import retry_read_once
from modules.staff.models import StaffMember
from modules.staff.repositories.interfaces import IStaffRepository


class StaffDjangoRepository(IStaffRepository):
    @retry_read_once
    def get_by_username(self, username: str) -> Optional[StaffMember]:
        return StaffMember.objects.filter(username=username).first()

    @retry_read_once
    def list_active(self, role: Optional[str] = None) -> List[StaffMember]:
        queryset = StaffMember.objects.filter(is_active=True)
        if role:
            queryset = queryset.filter(role=role)
        return list(queryset)
