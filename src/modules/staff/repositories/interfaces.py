"""Worker directory repository contract (read-only)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from modules.staff.models import StaffMember


class IStaffRepository(ABC):
    @abstractmethod
    def get_by_username(self, username: str) -> Optional[StaffMember]:
        """Return the directory entry for *username*, active or not."""

    @abstractmethod
    def list_active(self, role: Optional[str] = None) -> List[StaffMember]:
        """List active members, optionally restricted to one role."""
