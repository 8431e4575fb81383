"""Seed the database with demo data for local development.

Usage:
    python -m cashmemo.scripts.seed
"""

from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from faker import Faker
from rich.console import Console
from rich.table import Table
from sqlalchemy import text

from cashmemo.constants import STATUS_LABELS, today
from cashmemo.db import get_connection, initialize_db
from cashmemo.finance import recompute_invoice_totals
from cashmemo.models import format_taka
from cashmemo.models.invoice import Invoice, InvoiceItem
from cashmemo.models.transaction import TransactionKind
from cashmemo.repositories.factory import (
    get_activity_log_repository,
    get_customer_repository,
    get_invoice_repository,
    get_pending_item_repository,
    get_transaction_repository,
    get_user_repository,
)
from cashmemo.services.activity_service import ActivityService
from cashmemo.services.customer_service import CustomerService
from cashmemo.services.invoice_service import InvoiceService
from cashmemo.services.user_service import UserService

console = Console()
fake = Faker("en_IN")

MAIN_EMAIL = "admin@example.com"
PASSWORD = "password"
NUM_CUSTOMERS = 8
NUM_WALK_INS = 3

TABLES_TO_TRUNCATE = [
    "activity_log",
    "pending_items",
    "transactions",
    "invoice_items",
    "invoices",
    "customers",
    "users",
]

# (description, rate, area priced)
JOB_TEMPLATES = [
    ("PVC Banner", Decimal("18"), True),
    ("Flex Print", Decimal("15"), True),
    ("Visiting Card (box)", Decimal("350"), False),
    ("Leaflet A4 Color", Decimal("4.50"), False),
    ("Wedding Card", Decimal("25"), False),
    ("Sticker Print", Decimal("12"), True),
    ("Rubber Stamp", Decimal("250"), False),
    ("Cash Memo Book", Decimal("180"), False),
]

PENDING_TEMPLATES = [
    "Design revision",
    "Lamination",
    "Extra copies",
    "Frame fitting",
]


def _truncate_all(conn) -> None:
    console.print("\n[yellow]Clearing all tables...[/yellow]")
    for table in TABLES_TO_TRUNCATE:
        conn.execute(text(f"DELETE FROM {table}"))  # noqa: S608
        console.print(f"  Cleared [dim]{table}[/dim]")
    conn.commit()
    console.print("[green]All tables cleared.[/green]\n")


def _random_items() -> list[InvoiceItem]:
    items = []
    for description, rate, area in random.sample(JOB_TEMPLATES, random.randint(1, 4)):
        item = InvoiceItem(description=description, rate=rate, quantity=Decimal(random.randint(1, 5)))
        if area:
            item.length = Decimal(random.choice([3, 4, 5, 6, 8, 10]))
            item.width = Decimal(random.choice([2, 3, 4]))
        items.append(item)
    return recompute_invoice_totals(items, Decimal("0")).items


def _random_advance(total: Decimal) -> Decimal:
    roll = random.random()
    if roll > 0.6:
        return total
    if roll > 0.3:
        return (total / 2).quantize(Decimal("1"))
    return Decimal("0")


def _create_customers(customer_service: CustomerService) -> list[str]:
    console.print("[cyan]Creating customers...[/cyan]")
    names = []
    for _ in range(NUM_CUSTOMERS):
        customer = customer_service.add_customer(
            fake.unique.company(),
            address=fake.city(),
            mobile=f"01{random.randint(3, 9)}{random.randint(10000000, 99999999)}",
        )
        names.append(customer.name)
        console.print(f"  Created customer: {customer.name}")
    console.print(f"[green]{len(names)} customers created.[/green]\n")
    return names


def _create_invoices(invoice_service: InvoiceService, names: list[str]) -> int:
    console.print("[cyan]Creating invoices...[/cyan]")

    table = Table(title="Invoices created")
    table.add_column("Memo No", style="dim")
    table.add_column("Customer", style="bold")
    table.add_column("Total", justify="right")
    table.add_column("Status")

    plan = [(name, False) for name in names for _ in range(random.randint(1, 3))]
    plan += [(fake.name(), True) for _ in range(NUM_WALK_INS)]
    random.shuffle(plan)

    for name, walk_in in plan:
        draft = invoice_service.new_invoice()
        items = _random_items()
        total = sum((item.total for item in items), Decimal("0"))
        draft = draft.model_copy(
            update={
                "customer_name": name,
                "is_walk_in": walk_in,
                "memo_date": today() - timedelta(days=random.randint(0, 90)),
                "items": items,
                "advance": _random_advance(total),
            }
        )
        saved = invoice_service.save_invoice(draft)
        table.add_row(
            saved.serial_no,
            saved.customer_name,
            format_taka(saved.grand_total),
            STATUS_LABELS[saved.payment_status],
        )

    console.print(table)
    console.print(f"\n[green]{len(plan)} invoices created.[/green]\n")
    return len(plan)


def _create_ledger_entries(customer_service: CustomerService, names: list[str]) -> None:
    console.print("[cyan]Creating transactions and pending work...[/cyan]")
    for name in names:
        if random.random() > 0.5:
            customer_service.post_transaction(
                name,
                TransactionKind.DEPOSIT,
                Decimal(random.randint(5, 50) * 100),
                "Cash received",
            )
            console.print(f"  Deposit for [dim]{name}[/dim]")
        if random.random() > 0.7:
            customer_service.post_transaction(
                name,
                TransactionKind.DUE,
                Decimal(random.randint(1, 10) * 100),
                "Old balance carried forward",
            )
            console.print(f"  Due for [dim]{name}[/dim]")
        if random.random() > 0.6:
            customer_service.add_pending_item(
                name,
                random.choice(PENDING_TEMPLATES),
                quantity=Decimal(random.randint(1, 3)),
                rate=Decimal(random.randint(1, 10) * 50),
            )
            console.print(f"  Pending work for [dim]{name}[/dim]")
    console.print("[green]Ledger entries created.[/green]\n")


def main() -> None:
    console.print("[bold magenta]Cash Memo - Database Seeder[/bold magenta]")
    console.print("=" * 40)

    initialize_db()
    conn = get_connection()

    _truncate_all(conn)

    invoice_repo = get_invoice_repository()
    customer_repo = get_customer_repository()
    transaction_repo = get_transaction_repository()

    user_service = UserService(get_user_repository())
    invoice_service = InvoiceService(invoice_repo, customer_repo, transaction_repo)
    customer_service = CustomerService(
        customer_repo,
        invoice_repo,
        transaction_repo,
        get_pending_item_repository(),
        ActivityService(get_activity_log_repository()),
    )

    user = user_service.create_user(MAIN_EMAIL, PASSWORD)
    console.print(f"[bold green]Main user:[/bold green] {user.email} (id={user.id})\n")

    names = _create_customers(customer_service)
    total_invoices = _create_invoices(invoice_service, names)
    _create_ledger_entries(customer_service, names)

    console.print("[bold green]Seeding complete![/bold green]")
    console.print(f"  Customers: {len(names)}")
    console.print(f"  Invoices:  {total_invoices}")
    console.print(f"\n  Login with: [bold]{MAIN_EMAIL}[/bold] / [bold]{PASSWORD}[/bold]")


if __name__ == "__main__":  # pragma: no cover
    main()
