"""Staff directory exceptions."""

from __future__ import annotations

from rest_framework import status

from modules.core.exceptions import DomainError


class WorkerNotFound(DomainError):
    """The worker is not in the directory or is deactivated."""

    code = "worker_not_found"
    http_status = status.HTTP_400_BAD_REQUEST
    default_detail = "Worker not found."
