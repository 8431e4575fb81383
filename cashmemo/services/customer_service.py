from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from pydantic import BaseModel

from cashmemo.finance import ZERO, compute_customer_balance, customer_invoice_stats, names_match
from cashmemo.models import to_money
from cashmemo.models.activity_log import ActivityLog, ActivityType
from cashmemo.models.customer import Customer, CustomerStats, normalize_name
from cashmemo.models.invoice import Invoice, InvoiceItem
from cashmemo.models.pending_item import PendingItem
from cashmemo.models.transaction import Transaction, TransactionKind
from cashmemo.repositories.base import (
    CustomerRepository,
    InvoiceRepository,
    PendingItemRepository,
    TransactionRepository,
)
from cashmemo.services.activity_service import ActivityService

logger = logging.getLogger(__name__)


class CustomerLedger(BaseModel):
    customer_name: str
    customer: Customer | None = None
    invoices: list[Invoice] = []
    transactions: list[Transaction] = []
    pending_items: list[PendingItem] = []
    activity: list[ActivityLog] = []
    outstanding: Decimal = ZERO


class CustomerService:
    def __init__(
        self,
        customer_repo: CustomerRepository,
        invoice_repo: InvoiceRepository,
        transaction_repo: TransactionRepository,
        pending_repo: PendingItemRepository,
        activity_service: ActivityService,
    ) -> None:
        self.customer_repo = customer_repo
        self.invoice_repo = invoice_repo
        self.transaction_repo = transaction_repo
        self.pending_repo = pending_repo
        self.activity_service = activity_service

    # ---- Registry ----

    def list_customers(self) -> list[Customer]:
        result = self.customer_repo.list_all()
        logger.debug("Listed %d customers", len(result))
        return result

    def search_customers(self, term: str) -> list[Customer]:
        needle = term.strip().lower()
        return [c for c in self.list_customers() if needle in c.name.lower() or (c.mobile and needle in c.mobile)]

    def suggest(self, partial_name: str) -> list[str]:
        """Registered names containing ``partial_name``, for autocompletion."""
        needle = normalize_name(partial_name)
        if not needle:
            return []
        return [c.name for c in self.list_customers() if needle in c.name.lower()]

    def get_customer(self, name: str) -> Customer | None:
        result = self.customer_repo.get_by_name(name)
        logger.debug("get_customer name=%s found=%s", name, result is not None)
        return result

    def add_customer(
        self,
        name: str,
        address: str = "",
        mobile: str = "",
        opening_balance: Decimal = ZERO,
    ) -> Customer:
        name = name.strip()
        if not name:
            raise ValueError("Name is required")
        result = self.customer_repo.upsert(
            Customer(name=name, address=address, mobile=mobile, opening_balance=to_money(opening_balance))
        )
        logger.info("Customer saved: id=%s name=%s", result.id, result.name)
        return result

    def delete_customer(self, name: str) -> None:
        self.customer_repo.delete(name)
        logger.info("Customer %s deleted", name)

    def customer_stats(self) -> dict[str, CustomerStats]:
        """Invoice due and count per customer, keyed by normalized name."""
        return customer_invoice_stats(self.invoice_repo.list_all())

    # ---- Balances ----

    def outstanding_balance(self, name: str) -> Decimal:
        try:
            invoices = self.invoice_repo.list_all()
            transactions = self.transaction_repo.list_by_customer(name)
        except Exception:
            logger.exception("Failed to compute outstanding balance for %s", name)
            return ZERO
        return compute_customer_balance(name, invoices, transactions)

    def load_ledger(self, name: str) -> CustomerLedger:
        """Everything the customer detail view shows. Degrades to an empty ledger."""
        try:
            invoices = [inv for inv in self.invoice_repo.list_all() if names_match(inv.customer_name, name)]
            transactions = self.transaction_repo.list_by_customer(name)
            pending = self.pending_repo.list_by_customer(name)
            activity = self.activity_service.list_by_customer(name)
            customer = self.customer_repo.get_by_name(name)
        except Exception:
            logger.exception("Failed to load ledger for %s", name)
            return CustomerLedger(customer_name=name)
        return CustomerLedger(
            customer_name=name,
            customer=customer,
            invoices=invoices,
            transactions=transactions,
            pending_items=pending,
            activity=activity,
            outstanding=compute_customer_balance(name, invoices, transactions),
        )

    # ---- Ledger transactions ----

    def post_transaction(
        self,
        name: str,
        kind: TransactionKind,
        amount: Decimal | None,
        description: str,
        on: date | None = None,
    ) -> Transaction:
        if not name.strip():
            raise ValueError("Customer name is required")
        if not description.strip() or amount is None or amount <= 0:
            raise ValueError("Description and Amount required")

        transaction = Transaction(
            customer_name=name,
            description=description.strip(),
            amount=to_money(amount),
            kind=kind,
        )
        if on is not None:
            transaction.date = on
        result = self.transaction_repo.create(transaction)
        logger.info("Transaction posted: customer=%s kind=%s amount=%s", name, kind.value, result.amount)

        self.activity_service.safe_log(
            name,
            ActivityType.MANUAL_TRANSACTION,
            description=f"{kind.value}: {result.description}",
            amount=result.amount,
            on=result.date,
        )
        return result

    # ---- Pending work ----

    def add_pending_item(
        self,
        name: str,
        description: str,
        quantity: Decimal = Decimal("1"),
        rate: Decimal = ZERO,
        total: Decimal | None = None,
    ) -> PendingItem:
        if total is None:
            total = quantity * rate
        total = to_money(total)
        if not description.strip() or total <= 0:
            raise ValueError("Description and Total required")
        result = self.pending_repo.create(
            PendingItem(
                customer_name=name,
                description=description.strip(),
                quantity=quantity,
                rate=rate,
                total=total,
            )
        )
        logger.info("Pending item added: id=%s customer=%s total=%s", result.id, name, result.total)
        return result

    def delete_pending_item(self, item_id: int) -> None:
        self.pending_repo.delete(item_id)
        logger.info("Pending item %s deleted", item_id)

    def convert_pending_items(self, name: str, item_ids: list[int]) -> list[InvoiceItem]:
        """Turn pending work into draft invoice lines.

        Nothing is deleted here. Each line remembers its source row in
        ``pending_item_id``; call ``settle_pending_items`` once the invoice
        carrying the lines has been saved.
        """
        converted: list[InvoiceItem] = []
        for item_id in item_ids:
            pending = self.pending_repo.get_by_id(item_id)
            if pending is None or not names_match(pending.customer_name, name):
                logger.warning("Pending item %s not found for %s, skipping", item_id, name)
                continue
            computed = to_money(pending.quantity * pending.rate)
            converted.append(
                InvoiceItem(
                    description=pending.description,
                    quantity=pending.quantity,
                    rate=pending.rate,
                    total=pending.total,
                    total_overridden=pending.total != computed,
                    pending_item_id=item_id,
                )
            )
        logger.debug("Prepared %d pending items for %s", len(converted), name)
        return converted

    def settle_pending_items(self, name: str, items: list[InvoiceItem]) -> int:
        """Drop the pending rows billed by ``items`` and log each conversion."""
        settled = 0
        for item in items:
            if item.pending_item_id is None:
                continue
            self.pending_repo.delete(item.pending_item_id)
            self.activity_service.safe_log(
                name,
                ActivityType.PENDING_CONVERTED,
                description=item.description,
                amount=item.total,
            )
            settled += 1
        if settled:
            logger.info("Converted %d pending items for %s", settled, name)
        return settled
