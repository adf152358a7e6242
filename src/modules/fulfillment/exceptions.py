"""Fulfillment domain exceptions."""

from __future__ import annotations

from rest_framework import status

from modules.core.exceptions import DomainError


class TaskNotFound(DomainError):
    code = "task_not_found"
    http_status = status.HTTP_404_NOT_FOUND
    default_detail = "Task not found."
