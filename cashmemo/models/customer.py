from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel


def normalize_name(name: str | None) -> str:
    """Comparison key for customer names typed as free text."""
    return (name or "").strip().lower()


class Customer(BaseModel):
    id: int | None = None
    uuid: str = ""
    name: str
    address: str = ""
    mobile: str = ""
    opening_balance: Decimal = Decimal("0.00")
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CustomerStats(BaseModel):
    total_due: Decimal = Decimal("0.00")
    invoice_count: int = 0
