from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from cashmemo.constants import today


class InvoiceItem(BaseModel):
    id: int | None = None
    invoice_id: int | None = None
    description: str = ""
    length: Decimal | None = None
    width: Decimal | None = None
    quantity: Decimal = Decimal("1")
    rate: Decimal = Decimal("0")
    total: Decimal = Decimal("0.00")
    total_overridden: bool = False
    sort_order: int = 0
    # Draft only, never persisted: the pending work row this line was imported from.
    pending_item_id: int | None = None

    @property
    def is_area_priced(self) -> bool:
        return bool(self.length and self.width and self.length > 0 and self.width > 0)

    @property
    def quantity_label(self) -> str:
        """'3x2 (4)' for area-priced items, otherwise the bare quantity."""
        qty = _trim(self.quantity)
        if self.is_area_priced:
            return f"{_trim(self.length)}x{_trim(self.width)} ({qty})"
        return qty


class Invoice(BaseModel):
    id: int | None = None
    uuid: str = ""
    serial_no: str = ""
    customer_name: str = ""
    customer_address: str = ""
    customer_mobile: str = ""
    memo_date: date = Field(default_factory=today)
    items: list[InvoiceItem] = []
    grand_total: Decimal = Decimal("0.00")
    advance: Decimal = Decimal("0.00")
    due: Decimal = Decimal("0.00")
    is_paid: bool = False
    in_word: str = "Zero Only."
    is_walk_in: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def has_dimensions(self) -> bool:
        return any(item.length or item.width for item in self.items)

    @property
    def payment_status(self) -> str:
        if self.due <= 0 and self.grand_total > 0:
            return "paid"
        if self.advance > 0 and self.due > 0:
            return "partial"
        return "unpaid"


def _trim(value: Decimal | None) -> str:
    if value is None:
        return ""
    text = f"{value:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
