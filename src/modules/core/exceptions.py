"""Domain error base class and the DRF exception handler.

Every bounded context raises subclasses of ``DomainError``.  Each one
carries a stable machine-readable ``code`` and the HTTP status the API
layer should answer with, so views never need per-exception ``try`` blocks
and the offer-suggestion list and manual code entry surface the same
reason for the same failure.

Error envelope (all API failures)::

    {
        "type": "client_error" | "validation_error" | "server_error",
        "errors": [{"code": "...", "detail": "...", "attr": null}]
    }
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError as PydanticValidationError
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = structlog.get_logger(__name__)


class DomainError(Exception):
    """Base class for business-rule violations surfaced to API callers."""

    code: str = "domain_error"
    http_status: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "The request violates a business rule."

    def __init__(self, detail: Optional[str] = None, **context: Any) -> None:
        self.detail = detail or self.default_detail
        self.context = context
        super().__init__(self.detail)


class Forbidden(DomainError):
    """The actor is not allowed to perform the operation."""

    code = "forbidden"
    http_status = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to perform this action."


class IllegalTransition(DomainError):
    """A status change is not an edge of the relevant transition graph."""

    code = "illegal_transition"
    http_status = status.HTTP_409_CONFLICT
    default_detail = "This status change is not allowed."


class PrerequisiteNotMet(DomainError):
    """An operation was attempted before the state it depends on exists."""

    code = "prerequisite_not_met"
    http_status = status.HTTP_409_CONFLICT
    default_detail = "A prerequisite for this operation has not been met."


# ---------------------------------------------------------------------------
# DRF integration
# ---------------------------------------------------------------------------


def _error(code: str, detail: Any, attr: Optional[str] = None) -> Dict[str, Any]:
    return {"code": code, "detail": str(detail), "attr": attr}


def _flatten_drf_detail(detail: Any, attr: Optional[str] = None) -> List[Dict[str, Any]]:
    if isinstance(detail, dict):
        errors: List[Dict[str, Any]] = []
        for key, value in detail.items():
            nested = key if attr is None else f"{attr}.{key}"
            errors.extend(_flatten_drf_detail(value, attr if key == "non_field_errors" else nested))
        return errors
    if isinstance(detail, list):
        errors = []
        for item in detail:
            errors.extend(_flatten_drf_detail(item, attr))
        return errors
    code = getattr(detail, "code", "invalid")
    return [_error(code, detail, attr)]


def _pydantic_errors(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    return [
        _error(
            "invalid",
            err.get("msg", "Invalid value."),
            ".".join(str(part) for part in err.get("loc", ())) or None,
        )
        for err in exc.errors()
    ]


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    """Render domain, validation and DRF errors in the standard envelope."""
    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else None

    if isinstance(exc, DomainError):
        logger.info(
            "api.domain_error",
            code=exc.code,
            detail=exc.detail,
            view=view_name,
            **exc.context,
        )
        return Response(
            {"type": "client_error", "errors": [_error(exc.code, exc.detail)]},
            status=exc.http_status,
        )

    if isinstance(exc, PydanticValidationError):
        return Response(
            {"type": "validation_error", "errors": _pydantic_errors(exc)},
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = drf_exception_handler(exc, context)
    if response is None:
        logger.error("api.unhandled_error", view=view_name, error=repr(exc))
        return None

    error_type = (
        "validation_error"
        if isinstance(exc, drf_exceptions.ValidationError)
        else "client_error"
    )
    if response.status_code >= 500:
        error_type = "server_error"
    response.data = {
        "type": error_type,
        "errors": _flatten_drf_detail(getattr(exc, "detail", response.data)),
    }
    return response
