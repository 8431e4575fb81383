from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from cashmemo.constants import today


class TransactionKind(str, Enum):
    DEPOSIT = "Deposit"
    DUE = "Due"


class Transaction(BaseModel):
    id: int | None = None
    uuid: str = ""
    customer_name: str
    date: dt.date = Field(default_factory=today)
    description: str
    amount: Decimal
    kind: TransactionKind
    created_at: dt.datetime | None = None

    @property
    def signed_amount(self) -> Decimal:
        """Effect on the customer's balance: Due adds, Deposit subtracts."""
        if self.kind == TransactionKind.DEPOSIT:
            return -self.amount
        return self.amount
