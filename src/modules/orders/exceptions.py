"""Order domain exceptions.

Raised by the Service Layer when business rules are violated and
rendered by ``api_exception_handler``.  The cross-context errors
(``Forbidden``, ``IllegalTransition``, ``PrerequisiteNotMet``) live in
``modules.core.exceptions`` and are re-exported here for convenience.
"""

from __future__ import annotations

from rest_framework import status

from modules.core.exceptions import (  # noqa: F401
    DomainError,
    Forbidden,
    IllegalTransition,
    PrerequisiteNotMet,
)


class OrderNotFound(DomainError):
    """The requested order does not exist."""

    code = "order_not_found"
    http_status = status.HTTP_404_NOT_FOUND
    default_detail = "Order not found."


class RefundNotApplicable(DomainError):
    """The order is not a cancelled, prepaid order."""

    code = "refund_not_applicable"
    http_status = status.HTTP_409_CONFLICT
    default_detail = "Refunds apply only to cancelled orders paid online."

