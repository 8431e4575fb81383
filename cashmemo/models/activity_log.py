from __future__ import annotations

import datetime as dt
from decimal import Decimal

from pydantic import BaseModel, Field

from cashmemo.constants import today


class ActivityType:
    """String constants for activity log entry types."""

    MANUAL_TRANSACTION = "Manual Transaction"
    PENDING_CONVERTED = "Pending Converted"


class ActivityLog(BaseModel):
    id: int | None = None
    customer_name: str
    date: dt.date = Field(default_factory=today)
    activity_type: str
    description: str = ""
    amount: Decimal = Decimal("0.00")
    created_at: dt.datetime | None = None
