"""Invoice arithmetic and customer balance aggregation.

Everything here is pure: callers pass in models, get new models or numbers
back, and persist the results themselves.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from pydantic import BaseModel

from cashmemo.models import to_money
from cashmemo.models.customer import CustomerStats, normalize_name
from cashmemo.models.invoice import Invoice, InvoiceItem
from cashmemo.models.transaction import Transaction
from cashmemo.words import amount_to_words

ZERO = Decimal("0.00")

PRICING_FIELDS = frozenset({"quantity", "rate", "length", "width"})
EDITABLE_FIELDS = PRICING_FIELDS | {"description", "total"}


class InvoiceTotals(BaseModel):
    items: list[InvoiceItem]
    grand_total: Decimal
    due: Decimal
    is_paid: bool
    in_word: str


class DashboardSummary(BaseModel):
    total_invoices: int = 0
    total_customers: int = 0
    total_revenue: Decimal = ZERO
    pending_revenue: Decimal = ZERO
    paid_count: int = 0
    partial_count: int = 0
    unpaid_count: int = 0


# ---- Line and invoice totals ----


def compute_item_total(item: InvoiceItem) -> Decimal:
    """rate x quantity, times length x width when both dimensions are positive."""
    total = (item.rate or ZERO) * (item.quantity or ZERO)
    if item.is_area_priced:
        total = total * item.length * item.width  # type: ignore[operator]
    return to_money(total)


def apply_item_edit(item: InvoiceItem, field: str, value) -> InvoiceItem:
    """Return a copy of ``item`` with ``field`` set to ``value``.

    Pricing edits recompute the total unless it was entered by hand. Setting
    ``total`` marks it as overridden; setting it to None drops the override
    and recomputes.
    """
    if field not in EDITABLE_FIELDS:
        raise ValueError(f"Field '{field}' is not editable")

    if field == "total":
        if value is None:
            updated = item.model_copy(update={"total_overridden": False})
            updated.total = compute_item_total(updated)
            return updated
        return item.model_copy(update={"total": to_money(value), "total_overridden": True})

    updated = item.model_copy(update={field: value})
    if field in PRICING_FIELDS and not updated.total_overridden:
        updated.total = compute_item_total(updated)
    return updated


def derive_due(grand_total: Decimal, advance: Decimal) -> Decimal:
    return to_money(max(ZERO, to_money(grand_total) - to_money(advance)))


def derive_is_paid(grand_total: Decimal, due: Decimal) -> bool:
    return due <= 0 and grand_total > 0


def recompute_invoice_totals(items: Iterable[InvoiceItem], advance: Decimal | None) -> InvoiceTotals:
    refreshed: list[InvoiceItem] = []
    for index, item in enumerate(items):
        update: dict = {"sort_order": index}
        if not item.total_overridden:
            update["total"] = compute_item_total(item)
        refreshed.append(item.model_copy(update=update))

    grand_total = to_money(sum((item.total or ZERO for item in refreshed), ZERO))
    due = derive_due(grand_total, advance or ZERO)
    return InvoiceTotals(
        items=refreshed,
        grand_total=grand_total,
        due=due,
        is_paid=derive_is_paid(grand_total, due),
        in_word=amount_to_words(grand_total),
    )


def apply_totals(invoice: Invoice) -> Invoice:
    """Copy of ``invoice`` with every derived field brought up to date."""
    totals = recompute_invoice_totals(invoice.items, invoice.advance)
    return invoice.model_copy(
        update={
            "items": totals.items,
            "advance": to_money(invoice.advance),
            "grand_total": totals.grand_total,
            "due": totals.due,
            "is_paid": totals.is_paid,
            "in_word": totals.in_word,
        }
    )


def apply_payment(invoice: Invoice, advance: Decimal) -> Invoice:
    return apply_totals(invoice.model_copy(update={"advance": to_money(advance)}))


def mark_fully_paid(invoice: Invoice) -> Invoice:
    return apply_payment(invoice, invoice.grand_total)


def payable_total(grand_total: Decimal, previous_due: Decimal, include_previous_due: bool) -> Decimal:
    """Amount printed on the memo, optionally carrying the customer's previous due."""
    if not include_previous_due:
        return to_money(grand_total)
    return to_money(max(ZERO, to_money(grand_total) + to_money(previous_due)))


# ---- Customer balances ----


def names_match(a: str | None, b: str | None) -> bool:
    return normalize_name(a) == normalize_name(b)


def compute_customer_balance(
    customer_name: str,
    invoices: Iterable[Invoice],
    transactions: Iterable[Transaction],
    exclude_serial: str | None = None,
) -> Decimal:
    """Outstanding balance: invoice dues plus Due entries minus Deposit entries.

    Negative means the customer has credit on file.
    """
    key = normalize_name(customer_name)
    if not key:
        return ZERO

    invoice_due = sum(
        (
            inv.due or ZERO
            for inv in invoices
            if normalize_name(inv.customer_name) == key and (exclude_serial is None or inv.serial_no != exclude_serial)
        ),
        ZERO,
    )
    ledger = sum(
        (t.signed_amount for t in transactions if normalize_name(t.customer_name) == key),
        ZERO,
    )
    return to_money(invoice_due + ledger)


def customer_invoice_stats(invoices: Iterable[Invoice]) -> dict[str, CustomerStats]:
    """Total due and invoice count per normalized customer name."""
    stats: dict[str, CustomerStats] = {}
    for inv in invoices:
        entry = stats.setdefault(normalize_name(inv.customer_name), CustomerStats())
        entry.total_due = to_money(entry.total_due + (inv.due or ZERO))
        entry.invoice_count += 1
    return stats


def summarize_invoices(invoices: Iterable[Invoice], customer_count: int = 0) -> DashboardSummary:
    summary = DashboardSummary()
    names: set[str] = set()
    for inv in invoices:
        summary.total_invoices += 1
        names.add(normalize_name(inv.customer_name))
        total, due, advance = inv.grand_total or ZERO, inv.due or ZERO, inv.advance or ZERO
        if due <= 0 and total > 0:
            summary.paid_count += 1
            summary.total_revenue += total
        elif advance > 0 and due > 0:
            summary.partial_count += 1
            summary.pending_revenue += due
            summary.total_revenue += advance
        elif due > 0:
            summary.unpaid_count += 1
            summary.pending_revenue += due
    summary.total_customers = max(len(names), customer_count)
    summary.total_revenue = to_money(summary.total_revenue)
    summary.pending_revenue = to_money(summary.pending_revenue)
    return summary


# ---- Serial numbers ----


def next_serial(existing_serials: Iterable[str | int], floor: int = 10000) -> str:
    """max(numeric serials) + 1, or floor + 1 when there are none."""
    numbers: list[int] = []
    for serial in existing_serials:
        try:
            numbers.append(int(str(serial).strip()))
        except ValueError:
            continue
    return str(max(numbers, default=floor) + 1)
