"""Django ORM implementation of the Task repository."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.utils import timezone

from modules.core.repositories.interfaces import retry_read_once
from modules.fulfillment.models import Task
from modules.fulfillment.repositories.interfaces import ITaskRepository

logger = structlog.get_logger(__name__)


class TaskDjangoRepository(ITaskRepository):
    @retry_read_once
    def get_by_id(self, id: str) -> Optional[Task]:
        try:
            return Task.objects.filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    @retry_read_once
    def get_by_order_and_type(self, order_id: str, task_type: str) -> Optional[Task]:
        return Task.objects.filter(order_id=order_id, type=task_type).first()

    @retry_read_once
    def list_for_order(self, order_id: str) -> List[Task]:
        return list(Task.objects.filter(order_id=order_id))

    @retry_read_once
    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Task]:
        """Supported filter keys: ``order_id``, ``assigned_to``, ``status``, ``type``."""
        queryset = Task.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def create(self, data: Dict[str, Any]) -> Task:
        task = Task.objects.create(**data)
        logger.info("task.persisted", task_id=str(task.id), type=task.type)
        return task

    def save(self, entity: Task) -> Task:
        entity.save()
        return entity

    def update(self, task_id: str, fields: Dict[str, Any]) -> int:
        return Task.objects.filter(id=task_id).update(
            **fields, updated_at=timezone.now()
        )

    def mark_completed_once(self, task_id: str, completed_at: Any) -> int:
        return Task.objects.filter(id=task_id, completed_at__isnull=True).update(
            completed_at=completed_at
        )
