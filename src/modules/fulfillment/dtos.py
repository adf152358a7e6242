"""Fulfillment DTOs for the Service Layer (pydantic v2, immutable)."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from modules.fulfillment.constants import TaskPriority, TaskStatus, TaskType


class CreateTaskDTO(BaseModel):
    """``assigned_to`` defaults to the worker the order is assigned to."""

    model_config = ConfigDict(frozen=True)

    order_id: str
    type: TaskType
    assigned_to: Optional[str] = None
    priority: TaskPriority = TaskPriority.MEDIUM
    notes: str = ""


class UpdateTaskDTO(BaseModel):
    """Partial update: ``None`` means "leave unchanged"."""

    model_config = ConfigDict(frozen=True)

    status: Optional[TaskStatus] = None
    assigned_to: Optional[str] = None
    priority: Optional[TaskPriority] = None
    notes: Optional[str] = None

    @property
    def touches_elevated_fields(self) -> bool:
        return self.assigned_to is not None or self.priority is not None


class WorkflowStepStateDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    name: str
    description: str
    order: int
    required: bool
    completed: bool
    task_id: Optional[str] = None
    task_status: Optional[str] = None
    assigned_to: Optional[str] = None


class WorkflowSummaryDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: str
    order_number: str
    progress_percent: int
    current_step: Optional[str]
    steps: List[WorkflowStepStateDTO]
