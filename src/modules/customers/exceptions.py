"""Customer domain exceptions."""

from __future__ import annotations

from rest_framework import status

from modules.core.exceptions import DomainError


class CustomerNotFound(DomainError):
    code = "customer_not_found"
    http_status = status.HTTP_404_NOT_FOUND
    default_detail = "Customer not found."
