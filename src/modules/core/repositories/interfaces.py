"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that all
domain-specific repository interfaces extend.  Service-layer code
depends on this abstraction, never on Django ORM directly.

Also provides ``retry_read_once``: the only retry policy of the
persistence boundary.  Reads are idempotent, so a connectivity fault is
retried exactly once on a fresh connection.  Writes are never decorated
with it: a blindly retried status write could apply a transition twice,
so callers re-derive intent from the latest state instead.
"""

from __future__ import annotations

import functools
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Generic, Iterable, Optional, TypeVar

import structlog
from django.db import InterfaceError, OperationalError, close_old_connections

logger = structlog.get_logger(__name__)

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])


def retry_read_once(func: F) -> F:
    """Retry a read-only repository call once on a connectivity fault."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as exc:
            logger.warning(
                "repository.read_retry",
                operation=func.__qualname__,
                error=str(exc),
            )
            close_old_connections()
            return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the domain entity managed by the
    repository (e.g. ``Order``, ``Offer``).
    """

    @abstractmethod
    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key."""

    @abstractmethod
    def list(self, filters: Optional[Dict[str, Any]] = None) -> Iterable[T]:
        """List entities with optional filters."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Persist (create or update) an entity."""
