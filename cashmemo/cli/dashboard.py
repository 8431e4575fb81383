from __future__ import annotations

from rich.console import Console
from rich.table import Table

from cashmemo.constants import STATUS_LABELS, format_display_date
from cashmemo.models import format_taka
from cashmemo.services.customer_service import CustomerService
from cashmemo.services.invoice_service import InvoiceService

console = Console()

RECENT_LIMIT = 5


def show_dashboard(invoice_service: InvoiceService, customer_service: CustomerService) -> None:
    try:
        customers = customer_service.list_customers()
        summary = invoice_service.dashboard_summary(customer_count=len(customers))
        recent = invoice_service.list_invoices()[:RECENT_LIMIT]
    except Exception as e:
        console.print(f"[red]Failed to load dashboard: {e}[/red]")
        return

    table = Table(title="Dashboard", show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total Invoices", str(summary.total_invoices))
    table.add_row("Total Customers", str(summary.total_customers))
    table.add_row("Total Revenue", format_taka(summary.total_revenue))
    table.add_row("Pending Revenue", f"[red]{format_taka(summary.pending_revenue)}[/red]")
    table.add_row(
        "Paid / Partial / Due",
        f"{summary.paid_count} / {summary.partial_count} / {summary.unpaid_count}",
    )
    console.print()
    console.print(table)

    if not recent:
        return
    latest = Table(title="Recent Invoices")
    latest.add_column("Memo No", style="dim")
    latest.add_column("Date")
    latest.add_column("Customer")
    latest.add_column("Total", justify="right")
    latest.add_column("Status")
    for inv in recent:
        latest.add_row(
            inv.serial_no,
            format_display_date(inv.memo_date),
            inv.customer_name,
            format_taka(inv.grand_total),
            STATUS_LABELS[inv.payment_status],
        )
    console.print(latest)
    console.print()
