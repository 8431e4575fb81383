from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


class PendingItem(BaseModel):
    id: int | None = None
    customer_name: str
    description: str
    quantity: Decimal = Decimal("1")
    rate: Decimal = Decimal("0")
    total: Decimal = Decimal("0.00")
    created_at: datetime | None = None
