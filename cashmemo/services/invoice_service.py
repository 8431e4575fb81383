from __future__ import annotations

import logging
import time
from collections.abc import Callable
from decimal import Decimal

from cashmemo.finance import (
    ZERO,
    DashboardSummary,
    apply_payment,
    apply_totals,
    compute_customer_balance,
    next_serial,
    summarize_invoices,
)
from cashmemo.models.customer import Customer
from cashmemo.models.invoice import Invoice
from cashmemo.pdf.invoice import CashMemoPDF
from cashmemo.repositories.base import (
    CustomerRepository,
    DuplicateSerialError,
    InvoiceRepository,
    TransactionRepository,
)
from cashmemo.settings import settings
from cashmemo.storage.base import StorageBackend

logger = logging.getLogger(__name__)

STATUS_FILTERS = ("all", "paid", "unpaid")


def _storage_key(serial_no: str) -> str:
    prefix = settings.storage_prefix
    if prefix:
        return f"{prefix}/invoice_{serial_no}.pdf"
    return f"invoice_{serial_no}.pdf"


class InvoiceService:
    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        customer_repo: CustomerRepository,
        transaction_repo: TransactionRepository,
        storage: StorageBackend | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.invoice_repo = invoice_repo
        self.customer_repo = customer_repo
        self.transaction_repo = transaction_repo
        self.storage = storage
        self.pdf_generator = CashMemoPDF()
        self._clock = clock
        self._cache: tuple[float, list[Invoice]] | None = None

    # ---- Listing ----

    def _invalidate(self) -> None:
        self._cache = None

    def list_invoices(self, refresh: bool = False) -> list[Invoice]:
        ttl = settings.cache_ttl_seconds
        now = self._clock()
        if not refresh and ttl > 0 and self._cache is not None and now - self._cache[0] < ttl:
            logger.debug("Listed %d invoices (cached)", len(self._cache[1]))
            return list(self._cache[1])
        result = self.invoice_repo.list_all()
        self._cache = (now, result)
        logger.debug("Listed %d invoices", len(result))
        return list(result)

    def search_invoices(self, term: str = "", status: str = "all") -> list[Invoice]:
        if status not in STATUS_FILTERS:
            raise ValueError(f"Unknown status filter: {status}")
        needle = term.strip().lower()
        result = []
        for inv in self.list_invoices():
            if needle and needle not in inv.serial_no.lower() and needle not in inv.customer_name.lower():
                continue
            if status == "paid" and inv.payment_status != "paid":
                continue
            if status == "unpaid" and inv.payment_status == "paid":
                continue
            result.append(inv)
        return result

    def dashboard_summary(self, customer_count: int = 0) -> DashboardSummary:
        return summarize_invoices(self.list_invoices(), customer_count)

    def get_invoice(self, serial_no: str) -> Invoice | None:
        result = self.invoice_repo.get_by_serial(serial_no)
        logger.debug("get_invoice serial=%s found=%s", serial_no, result is not None)
        return result

    # ---- Drafting ----

    def next_serial(self) -> str:
        return next_serial(self.invoice_repo.list_serials(), settings.serial_floor)

    def new_invoice(self) -> Invoice:
        return Invoice(serial_no=self.next_serial())

    def previous_due(self, customer_name: str, exclude_serial: str | None = None) -> Decimal:
        """Customer's outstanding balance, excluding the invoice being edited.

        Lookup failures are logged and reported as zero so the form stays usable.
        """
        if not customer_name.strip():
            return ZERO
        try:
            invoices = self.invoice_repo.list_all()
            transactions = self.transaction_repo.list_by_customer(customer_name)
        except Exception:
            logger.exception("Failed to compute previous due for %s", customer_name)
            return ZERO
        return compute_customer_balance(customer_name, invoices, transactions, exclude_serial)

    # ---- Saving ----

    def _save_customer(self, invoice: Invoice) -> Customer:
        existing = self.customer_repo.get_by_name(invoice.customer_name)
        if existing is None:
            customer = Customer(
                name=invoice.customer_name,
                address=invoice.customer_address,
                mobile=invoice.customer_mobile,
            )
        else:
            customer = existing.model_copy(
                update={
                    "address": invoice.customer_address or existing.address,
                    "mobile": invoice.customer_mobile or existing.mobile,
                }
            )
        return self.customer_repo.upsert(customer)

    def _create_with_retry(self, invoice: Invoice) -> Invoice:
        attempts = max(1, settings.serial_retry_attempts)
        for attempt in range(1, attempts + 1):
            try:
                return self.invoice_repo.create(invoice)
            except DuplicateSerialError:
                if attempt == attempts:
                    raise
                fresh = self.next_serial()
                logger.warning(
                    "Serial %s taken, retrying as %s (attempt %d/%d)",
                    invoice.serial_no,
                    fresh,
                    attempt,
                    attempts,
                )
                invoice = invoice.model_copy(update={"serial_no": fresh})
        raise RuntimeError("unreachable")  # pragma: no cover

    def save_invoice(self, invoice: Invoice) -> Invoice:
        """Validate, recompute derived fields, then persist.

        New invoices (no id) are inserted and re-numbered if their serial was
        taken in the meantime; existing ones are upserted by serial.
        """
        name = invoice.customer_name.strip()
        if not name:
            raise ValueError("Customer name is required")
        if not invoice.serial_no.strip():
            raise ValueError("Invoice number is required")

        invoice = apply_totals(invoice.model_copy(update={"customer_name": name}))

        if not invoice.is_walk_in:
            self._save_customer(invoice)

        if invoice.id is None:
            saved = self._create_with_retry(invoice)
            logger.info(
                "Invoice created: serial=%s customer=%s total=%s",
                saved.serial_no,
                saved.customer_name,
                saved.grand_total,
            )
        else:
            saved = self.invoice_repo.upsert(invoice)
            logger.info(
                "Invoice updated: serial=%s customer=%s total=%s",
                saved.serial_no,
                saved.customer_name,
                saved.grand_total,
            )
        self._invalidate()
        return saved

    def update_payment(self, serial_no: str, advance: Decimal) -> Invoice:
        invoice = self.invoice_repo.get_by_serial(serial_no)
        if invoice is None:
            raise ValueError(f"Invoice not found: {serial_no}")
        updated = apply_payment(invoice, advance)
        self.invoice_repo.update_payment(serial_no, updated.advance, updated.due, updated.is_paid)
        self._invalidate()
        logger.info("Payment updated: serial=%s advance=%s due=%s", serial_no, updated.advance, updated.due)
        return updated

    def delete_invoice(self, serial_no: str) -> None:
        self.invoice_repo.delete(serial_no)
        self._invalidate()
        logger.info("Invoice %s deleted", serial_no)

    # ---- Printing ----

    def export_pdf(
        self,
        invoice: Invoice,
        previous_due: Decimal = ZERO,
        include_previous_due: bool = False,
    ) -> str:
        """Render the cash memo and store it. Returns the storage path."""
        if self.storage is None:
            raise RuntimeError("Storage backend not configured")
        pdf_bytes = self.pdf_generator.generate(
            invoice,
            previous_due=previous_due,
            include_previous_due=include_previous_due,
        )
        key = _storage_key(invoice.serial_no)
        path = self.storage.save(key, pdf_bytes)
        logger.info("PDF stored at %s for invoice %s", key, invoice.serial_no)
        return path
