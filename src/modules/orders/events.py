"""Domain events for the Orders bounded context.

Published on the in-memory bus after the writing transaction commits.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderCreated(DomainEvent):
    """Raised when an order is created.

    Carries the customer snapshot so subscribers do not re-read the order.
    """

    order_number: str = ""
    customer_email: str = ""
    customer_name: str = ""
    customer_phone: str = ""
    user_id: str = ""
    total: Decimal = Decimal("0.00")


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    old_status: str = ""
    new_status: str = ""
    actor_id: str = ""


@dataclass(frozen=True)
class OrderCancelled(DomainEvent):
    previous_status: str = ""
    refund_eligible: bool = False
    actor_id: str = ""


@dataclass(frozen=True)
class OrderAssigned(DomainEvent):
    assigned_to: Optional[str] = None
    previous_assignee: Optional[str] = None
    actor_id: str = ""
