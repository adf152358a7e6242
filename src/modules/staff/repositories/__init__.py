"""Staff repositories package."""

from modules.staff.repositories.django_repository import StaffDjangoRepository
from modules.staff.repositories.interfaces import IStaffRepository

__all__ = ["IStaffRepository", "StaffDjangoRepository"]
