"""Customer DTOs for the Service Layer.

``OrderCustomerSnapshotDTO`` is the payload of the profile sync task:
what an order knew about its customer when it was created.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class OrderCustomerSnapshotDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: EmailStr
    name: str = ""
    phone: str = ""
    user_id: Optional[str] = None
    order_total: Decimal = Field(default=Decimal("0"), ge=0)
    ordered_at: datetime

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v
