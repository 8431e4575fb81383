from __future__ import annotations

from datetime import date
from decimal import Decimal

import questionary
from rich.console import Console
from rich.table import Table

from cashmemo.cli.prompts import format_amount_input, prompt_amount, render_balance
from cashmemo.constants import STATUS_LABELS, format_display_date
from cashmemo.finance import ZERO, apply_item_edit, mark_fully_paid, recompute_invoice_totals
from cashmemo.models import format_taka
from cashmemo.models.invoice import Invoice, InvoiceItem
from cashmemo.services.customer_service import CustomerService
from cashmemo.services.invoice_service import InvoiceService

console = Console()

STATUS_CHOICES = {"All": "all", "Paid": "paid", "Unpaid": "unpaid"}


def show_invoice(invoice: Invoice) -> None:
    """Display an invoice's header, line items and totals."""
    console.print(f"  Memo #{invoice.serial_no}  |  {format_display_date(invoice.memo_date)}")
    walk_in = " (walk-in)" if invoice.is_walk_in else ""
    console.print(f"  Customer: [bold]{invoice.customer_name or '-'}[/bold]{walk_in}")
    if invoice.customer_address:
        console.print(f"  Address: {invoice.customer_address}")
    if invoice.customer_mobile:
        console.print(f"  Mobile: {invoice.customer_mobile}")

    table = Table()
    table.add_column("#", style="dim")
    table.add_column("Description")
    table.add_column("Qty", justify="center")
    table.add_column("Rate", justify="right")
    table.add_column("Total", justify="right")
    for i, item in enumerate(invoice.items, start=1):
        total = format_taka(item.total) + (" *" if item.total_overridden else "")
        table.add_row(str(i), item.description, item.quantity_label, f"{item.rate:,.2f}", total)
    console.print(table)

    console.print(f"  [bold]Total: {format_taka(invoice.grand_total)}[/bold]")
    console.print(f"  Advance: {format_taka(invoice.advance)}")
    console.print(f"  Due: {format_taka(invoice.due)}")
    console.print(f"  Status: {STATUS_LABELS[invoice.payment_status]}")
    console.print(f"  [dim]{invoice.in_word}[/dim]")


def _refresh(invoice: Invoice, items: list[InvoiceItem] | None = None) -> Invoice:
    totals = recompute_invoice_totals(items if items is not None else invoice.items, invoice.advance)
    return invoice.model_copy(
        update={
            "items": totals.items,
            "grand_total": totals.grand_total,
            "due": totals.due,
            "is_paid": totals.is_paid,
            "in_word": totals.in_word,
        }
    )


def _prompt_item(item: InvoiceItem, area_mode: bool) -> InvoiceItem | None:
    description = questionary.text("  Description:", default=item.description).ask()
    if description is None:
        return None
    item = apply_item_edit(item, "description", description)

    if not area_mode and (item.length is not None or item.width is not None):
        console.print("  [yellow]Banner mode is off, dropping length and width.[/yellow]")
        item = apply_item_edit(item, "length", None)
        item = apply_item_edit(item, "width", None)
    elif area_mode:
        length = prompt_amount("  Length (blank for none):", default=_dim_default(item.length))
        item = apply_item_edit(item, "length", length)
        width = prompt_amount("  Width (blank for none):", default=_dim_default(item.width))
        item = apply_item_edit(item, "width", width)

    quantity = prompt_amount("  Quantity:", default=_dim_default(item.quantity), allow_blank=False)
    if quantity is None:
        return None
    item = apply_item_edit(item, "quantity", quantity)
    rate = prompt_amount("  Rate:", default=format_amount_input(item.rate), allow_blank=False)
    if rate is None:
        return None
    item = apply_item_edit(item, "rate", rate)

    console.print(f"  Line total: {format_taka(item.total)}")
    override = prompt_amount("  Manual total (blank to keep):")
    if override is not None:
        item = apply_item_edit(item, "total", override)
    elif item.total_overridden and questionary.confirm("  Drop the manual total?", default=False).ask():
        item = apply_item_edit(item, "total", None)
    return item


def _dim_default(value: Decimal | None) -> str:
    if value is None:
        return ""
    text = f"{value:f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


def _edit_items(
    invoice: Invoice,
    customer_service: CustomerService,
    area_mode: bool,
) -> Invoice:
    while True:
        console.print()
        show_invoice(invoice)
        choices = ["Add item"]
        if invoice.items:
            choices += ["Edit item", "Remove item"]
        if invoice.customer_name and not invoice.is_walk_in:
            choices.append("Import pending work")
        choices.append("Done")

        action = questionary.select("Items:", choices=choices).ask()
        if action is None or action == "Done":
            return invoice

        if action == "Add item":
            new_item = _prompt_item(InvoiceItem(), area_mode)
            if new_item is not None:
                invoice = _refresh(invoice, invoice.items + [new_item])
        elif action in ("Edit item", "Remove item"):
            labels = {f"{i + 1} - {item.description or '(blank)'}": i for i, item in enumerate(invoice.items)}
            picked = questionary.select("Which item?", choices=list(labels) + ["Back"]).ask()
            if picked is None or picked == "Back":
                continue
            index = labels[picked]
            items = list(invoice.items)
            if action == "Remove item":
                items.pop(index)
            else:
                edited = _prompt_item(items[index], area_mode)
                if edited is None:
                    continue
                items[index] = edited
            invoice = _refresh(invoice, items)
        elif action == "Import pending work":
            invoice = _import_pending(invoice, customer_service)


def _import_pending(invoice: Invoice, customer_service: CustomerService) -> Invoice:
    ledger = customer_service.load_ledger(invoice.customer_name)
    if not ledger.pending_items:
        console.print("[yellow]No pending work for this customer.[/yellow]")
        return invoice
    imported = {item.pending_item_id for item in invoice.items if item.pending_item_id is not None}
    by_label = {
        f"{p.description} ({format_taka(p.total)})": p.id
        for p in ledger.pending_items
        if p.id is not None and p.id not in imported
    }
    if not by_label:
        console.print("[yellow]All pending work is already on this invoice.[/yellow]")
        return invoice
    picked = questionary.checkbox("Select pending work to bill:", choices=list(by_label)).ask()
    if not picked:
        return invoice
    items = customer_service.convert_pending_items(invoice.customer_name, [by_label[label] for label in picked])
    console.print(f"[green]{len(items)} item(s) imported. Pending work is cleared once the invoice is saved.[/green]")
    return _refresh(invoice, invoice.items + items)


def invoice_form_menu(
    invoice_service: InvoiceService,
    customer_service: CustomerService,
    editing: Invoice | None = None,
) -> Invoice | None:
    """Create a new invoice, or edit ``editing``. Returns the saved invoice."""
    console.print()
    console.print("[bold]Edit Invoice[/bold]" if editing else "[bold]Create Invoice[/bold]", style="cyan")

    invoice = editing.model_copy(deep=True) if editing else invoice_service.new_invoice()
    console.print(f"  Memo No: {invoice.serial_no}")

    names = [c.name for c in customer_service.list_customers()]
    name = questionary.autocomplete("Customer name:", choices=names or [""], default=invoice.customer_name).ask()
    if name is None:
        return None
    invoice.customer_name = name.strip()

    previous_due = ZERO
    if invoice.customer_name:
        previous_due = invoice_service.previous_due(invoice.customer_name, exclude_serial=invoice.serial_no)
        console.print(f"  {render_balance(previous_due)}")
        known = customer_service.get_customer(invoice.customer_name)
        if known is not None and not editing:
            invoice.customer_address = invoice.customer_address or known.address
            invoice.customer_mobile = invoice.customer_mobile or known.mobile

    invoice.customer_address = questionary.text("Address:", default=invoice.customer_address).ask() or ""
    invoice.customer_mobile = (
        questionary.text("Mobile (e.g. 017xxxxxxxx):", default=invoice.customer_mobile).ask() or ""
    )
    invoice.is_walk_in = bool(questionary.confirm("Walk-in customer?", default=invoice.is_walk_in).ask())

    while True:
        memo_date = questionary.text("Memo date (YYYY-MM-DD):", default=invoice.memo_date.isoformat()).ask()
        try:
            invoice.memo_date = date.fromisoformat(memo_date or "")
            break
        except ValueError:
            console.print("[red]Invalid date. Use YYYY-MM-DD.[/red]")

    area_mode = bool(questionary.confirm("Banner mode (length x width)?", default=invoice.has_dimensions).ask())
    invoice = _edit_items(invoice, customer_service, area_mode)

    advance = prompt_amount("Advance paid (blank for 0):", default=format_amount_input(invoice.advance))
    invoice.advance = advance if advance is not None else ZERO
    invoice = _refresh(invoice)
    if invoice.due > 0 and questionary.confirm("Mark as fully paid?", default=False).ask():
        invoice = mark_fully_paid(invoice)

    console.print()
    show_invoice(invoice)

    while True:
        if not questionary.confirm("Save invoice?", default=True).ask():
            console.print("[yellow]Not saved.[/yellow]")
            return None
        try:
            saved = invoice_service.save_invoice(invoice)
            break
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            return None
        except Exception as e:
            console.print(f"[red]Failed to save: {e}[/red]")

    console.print(f"[green bold]Invoice #{saved.serial_no} saved![/green bold]")
    try:
        customer_service.settle_pending_items(saved.customer_name, invoice.items)
    except Exception as e:
        console.print(f"[red]Failed to clear imported pending work: {e}[/red]")
    if questionary.confirm("Print to PDF now?", default=False).ask():
        _print_invoice(saved, invoice_service, previous_due)
    return saved


def _print_invoice(invoice: Invoice, invoice_service: InvoiceService, previous_due: Decimal | None = None) -> None:
    if previous_due is None:
        previous_due = invoice_service.previous_due(invoice.customer_name, exclude_serial=invoice.serial_no)
    include = False
    if previous_due and not invoice.is_walk_in:
        include = bool(questionary.confirm("Include previous due on the memo?", default=False).ask())
    try:
        path = invoice_service.export_pdf(invoice, previous_due=previous_due, include_previous_due=include)
    except Exception as e:
        console.print(f"[red]Failed to export PDF: {e}[/red]")
        return
    console.print(f"  PDF: {path}")


def list_invoices_menu(invoice_service: InvoiceService, customer_service: CustomerService) -> None:
    term = questionary.text("Search (memo no or customer, blank for all):").ask() or ""
    status_label = questionary.select("Status:", choices=list(STATUS_CHOICES)).ask()
    if status_label is None:
        return
    invoices = invoice_service.search_invoices(term, STATUS_CHOICES[status_label])

    if not invoices:
        console.print("[yellow]No invoices found.[/yellow]")
        return

    table = Table(title="Invoices")
    table.add_column("Memo No", style="dim")
    table.add_column("Date")
    table.add_column("Customer")
    table.add_column("Total", justify="right")
    table.add_column("Due", justify="right")
    table.add_column("Status")
    for inv in invoices:
        table.add_row(
            inv.serial_no,
            format_display_date(inv.memo_date),
            inv.customer_name,
            format_taka(inv.grand_total),
            format_taka(inv.due),
            STATUS_LABELS[inv.payment_status],
        )
    console.print()
    console.print(table)

    by_label = {f"{inv.serial_no} - {inv.customer_name}": inv.serial_no for inv in invoices}
    choice = questionary.select("Select an invoice:", choices=list(by_label) + ["Back"]).ask()
    if choice is None or choice == "Back":
        return

    invoice = invoice_service.get_invoice(by_label[choice])
    if invoice is None:
        console.print("[red]Invoice not found.[/red]")
        return
    invoice_detail_menu(invoice, invoice_service, customer_service)


def invoice_detail_menu(invoice: Invoice, invoice_service: InvoiceService, customer_service: CustomerService) -> None:
    while True:
        console.print()
        console.print(f"[bold cyan]Invoice #{invoice.serial_no}[/bold cyan]")
        show_invoice(invoice)
        console.print()

        action = questionary.select(
            "Actions:",
            choices=["Print PDF", "Edit Invoice", "Update Payment", "Delete Invoice", "Back"],
        ).ask()

        if action is None or action == "Back":
            break
        elif action == "Print PDF":
            _print_invoice(invoice, invoice_service)
        elif action == "Edit Invoice":
            saved = invoice_form_menu(invoice_service, customer_service, editing=invoice)
            if saved is not None:
                invoice = saved
        elif action == "Update Payment":
            advance = prompt_amount(
                f"Total received so far (grand total {format_taka(invoice.grand_total)}):",
                default=format_amount_input(invoice.advance),
                allow_blank=False,
            )
            if advance is None:
                continue
            try:
                invoice = invoice_service.update_payment(invoice.serial_no, advance)
            except Exception as e:
                console.print(f"[red]Failed to update payment: {e}[/red]")
                continue
            console.print("[green]Payment updated.[/green]")
        elif action == "Delete Invoice":
            confirm = questionary.confirm(
                f"Permanently delete invoice #{invoice.serial_no}?",
                default=False,
            ).ask()
            if confirm:
                try:
                    invoice_service.delete_invoice(invoice.serial_no)
                except Exception as e:
                    console.print(f"[red]Failed to delete: {e}[/red]")
                    continue
                console.print("[green]Invoice deleted.[/green]")
                break
