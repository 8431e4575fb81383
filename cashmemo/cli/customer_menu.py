from __future__ import annotations

from datetime import date

import questionary
from rich.console import Console
from rich.table import Table

from cashmemo.cli.prompts import prompt_amount, render_balance
from cashmemo.constants import STATUS_LABELS, format_display_date, today
from cashmemo.models import format_taka
from cashmemo.models.customer import normalize_name
from cashmemo.models.transaction import TransactionKind
from cashmemo.services.customer_service import CustomerLedger, CustomerService

console = Console()


def customers_menu(customer_service: CustomerService) -> None:
    while True:
        choice = questionary.select(
            "Customers",
            choices=[
                "List Customers",
                "Search Customers",
                "Add Customer",
                "Back",
            ],
        ).ask()

        if choice is None or choice == "Back":
            break
        elif choice == "List Customers":
            _pick_customer(customer_service, customer_service.list_customers())
        elif choice == "Search Customers":
            term = questionary.text("Name or mobile:").ask()
            if term:
                _pick_customer(customer_service, customer_service.search_customers(term))
        elif choice == "Add Customer":
            _add_customer(customer_service)


def _pick_customer(customer_service: CustomerService, customers: list) -> None:
    if not customers:
        console.print("[yellow]No customers found.[/yellow]")
        return

    stats = customer_service.customer_stats()
    table = Table(title="Customers")
    table.add_column("Name", style="bold")
    table.add_column("Mobile")
    table.add_column("Invoices", justify="right")
    table.add_column("Invoice Due", justify="right")
    table.add_column("Opening", justify="right")
    for c in customers:
        s = stats.get(normalize_name(c.name))
        table.add_row(
            c.name,
            c.mobile or "-",
            str(s.invoice_count if s else 0),
            format_taka(s.total_due) if s else "-",
            format_taka(c.opening_balance) if c.opening_balance else "-",
        )
    console.print()
    console.print(table)

    choices = [c.name for c in customers] + ["Back"]
    name = questionary.select("Select a customer:", choices=choices).ask()
    if name is None or name == "Back":
        return
    customer_detail_menu(customer_service, name)


def _add_customer(customer_service: CustomerService) -> None:
    console.print()
    console.print("[bold]New Customer[/bold]", style="cyan")

    name = questionary.text("Name:").ask()
    if not name:
        console.print("[yellow]Cancelled.[/yellow]")
        return
    address = questionary.text("Address:").ask() or ""
    mobile = questionary.text("Mobile:").ask() or ""
    opening = prompt_amount("Opening balance (blank for 0):")

    try:
        kwargs = {"opening_balance": opening} if opening is not None else {}
        customer = customer_service.add_customer(name, address, mobile, **kwargs)
    except Exception as e:
        console.print(f"[red]Failed to save customer: {e}[/red]")
        return
    console.print(f"[green bold]Customer '{customer.name}' saved![/green bold]")


def _show_ledger(ledger: CustomerLedger) -> None:
    console.print()
    console.print(f"[bold cyan]{ledger.customer_name}[/bold cyan]")
    console.print(f"  {render_balance(ledger.outstanding)}")
    if ledger.customer is not None and ledger.customer.opening_balance:
        opening = format_taka(ledger.customer.opening_balance)
        console.print(f"  [dim]Opening balance: {opening} (not in the balance)[/dim]")

    invoices = Table(title="Invoices")
    invoices.add_column("Memo No", style="dim")
    invoices.add_column("Date")
    invoices.add_column("Total", justify="right")
    invoices.add_column("Due", justify="right")
    invoices.add_column("Status")
    for inv in ledger.invoices:
        invoices.add_row(
            inv.serial_no,
            format_display_date(inv.memo_date),
            format_taka(inv.grand_total),
            format_taka(inv.due),
            STATUS_LABELS[inv.payment_status],
        )
    console.print(invoices)

    if ledger.transactions:
        transactions = Table(title="Transactions")
        transactions.add_column("Date")
        transactions.add_column("Description")
        transactions.add_column("Type")
        transactions.add_column("Amount", justify="right")
        for t in ledger.transactions:
            style = "green" if t.kind == TransactionKind.DEPOSIT else "red"
            transactions.add_row(
                format_display_date(t.date),
                t.description,
                f"[{style}]{t.kind.value}[/{style}]",
                format_taka(t.amount),
            )
        console.print(transactions)

    if ledger.pending_items:
        pending = Table(title="Pending Work")
        pending.add_column("#", style="dim")
        pending.add_column("Description")
        pending.add_column("Total", justify="right")
        for p in ledger.pending_items:
            pending.add_row(str(p.id), p.description, format_taka(p.total))
        console.print(pending)


def customer_detail_menu(customer_service: CustomerService, name: str) -> None:
    while True:
        ledger = customer_service.load_ledger(name)
        _show_ledger(ledger)
        console.print()

        action = questionary.select(
            "Actions:",
            choices=[
                "Add Transaction",
                "Add Pending Work",
                "Remove Pending Work",
                "Activity History",
                "Delete Customer",
                "Back",
            ],
        ).ask()

        if action is None or action == "Back":
            break
        elif action == "Add Transaction":
            _add_transaction(customer_service, name)
        elif action == "Add Pending Work":
            _add_pending(customer_service, name)
        elif action == "Remove Pending Work":
            _remove_pending(customer_service, ledger)
        elif action == "Activity History":
            _show_activity(ledger)
        elif action == "Delete Customer":
            confirm = questionary.confirm(
                f"Delete '{name}' from the customer list? Invoices are kept.",
                default=False,
            ).ask()
            if confirm:
                try:
                    customer_service.delete_customer(name)
                except Exception as e:
                    console.print(f"[red]Failed to delete: {e}[/red]")
                    continue
                console.print("[green]Customer deleted.[/green]")
                break


def _add_transaction(customer_service: CustomerService, name: str) -> None:
    kind_label = questionary.select(
        "Type:",
        choices=[
            "Deposit (customer paid)",
            "Due (customer owes)",
        ],
    ).ask()
    if kind_label is None:
        return
    kind = TransactionKind.DEPOSIT if kind_label.startswith("Deposit") else TransactionKind.DUE

    description = questionary.text("Description:").ask() or ""
    amount = prompt_amount("Amount:")
    on_text = questionary.text("Date (YYYY-MM-DD):", default=today().isoformat()).ask()
    try:
        on = date.fromisoformat(on_text) if on_text else None
    except ValueError:
        console.print("[red]Invalid date. Use YYYY-MM-DD.[/red]")
        return

    try:
        customer_service.post_transaction(name, kind, amount, description, on=on)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        return
    except Exception as e:
        console.print(f"[red]Failed to add transaction: {e}[/red]")
        return
    console.print("[green]Transaction added.[/green]")


def _add_pending(customer_service: CustomerService, name: str) -> None:
    description = questionary.text("Description:").ask() or ""
    total = prompt_amount("Total:")
    try:
        customer_service.add_pending_item(name, description, total=total)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        return
    except Exception as e:
        console.print(f"[red]Failed to add pending work: {e}[/red]")
        return
    console.print("[green]Pending work added.[/green]")


def _remove_pending(customer_service: CustomerService, ledger: CustomerLedger) -> None:
    if not ledger.pending_items:
        console.print("[yellow]No pending work.[/yellow]")
        return
    by_label = {f"{p.description} ({format_taka(p.total)})": p.id for p in ledger.pending_items}
    picked = questionary.select("Remove which item?", choices=list(by_label) + ["Back"]).ask()
    if picked is None or picked == "Back":
        return
    customer_service.delete_pending_item(by_label[picked])
    console.print("[green]Pending work removed.[/green]")


def _show_activity(ledger: CustomerLedger) -> None:
    if not ledger.activity:
        console.print("[yellow]No activity recorded.[/yellow]")
        return
    table = Table(title="Activity")
    table.add_column("Date")
    table.add_column("Type")
    table.add_column("Description")
    table.add_column("Amount", justify="right")
    for a in ledger.activity:
        table.add_row(format_display_date(a.date), a.activity_type, a.description, format_taka(a.amount))
    console.print()
    console.print(table)
