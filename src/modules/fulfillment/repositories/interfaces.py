"""Task repository contract."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.fulfillment.models import Task


class ITaskRepository(IRepository["Task"]):
    @abstractmethod
    def get_by_order_and_type(self, order_id: str, task_type: str) -> Optional[Task]:
        """The task of one workflow step of one order, if created."""

    @abstractmethod
    def list_for_order(self, order_id: str) -> List[Task]:
        """All tasks of an order, in workflow creation order."""

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Task:
        """Insert a task; raises ``IntegrityError`` on a duplicate step."""

    @abstractmethod
    def update(self, task_id: str, fields: Dict[str, Any]) -> int:
        """Write *fields* by primary key; returns the affected row count."""

    @abstractmethod
    def mark_completed_once(self, task_id: str, completed_at: Any) -> int:
        """Set ``completed_at`` only if it was never set."""
