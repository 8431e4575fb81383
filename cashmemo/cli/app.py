import questionary
from rich.console import Console

from cashmemo.cli.customer_menu import customers_menu
from cashmemo.cli.dashboard import show_dashboard
from cashmemo.cli.invoice_menu import invoice_form_menu, list_invoices_menu
from cashmemo.cli.user_menu import create_user, user_management_menu
from cashmemo.constants import format_long_date, today
from cashmemo.models.user import User
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
from cashmemo.settings import settings
from cashmemo.storage.factory import get_storage

console = Console()

MAX_SIGN_IN_ATTEMPTS = 3


def _build_services() -> tuple[InvoiceService, CustomerService, UserService]:
    invoice_repo = get_invoice_repository()
    customer_repo = get_customer_repository()
    transaction_repo = get_transaction_repository()
    storage = get_storage()
    return (
        InvoiceService(invoice_repo, customer_repo, transaction_repo, storage),
        CustomerService(
            customer_repo,
            invoice_repo,
            transaction_repo,
            get_pending_item_repository(),
            ActivityService(get_activity_log_repository()),
        ),
        UserService(get_user_repository()),
    )


def sign_in(user_service: UserService) -> User | None:
    if not user_service.has_users():
        console.print("[yellow]No users yet. Create the first account.[/yellow]")
        create_user(user_service)
        if not user_service.has_users():
            return None

    for _ in range(MAX_SIGN_IN_ATTEMPTS):
        email = questionary.text("Email:").ask()
        if email is None:
            return None
        password = questionary.password("Password:").ask()
        if password is None:
            return None
        user = user_service.authenticate(email, password)
        if user is not None:
            return user
        console.print("[red]Invalid email or password.[/red]")
    return None


def main_menu() -> None:
    invoice_service, customer_service, user_service = _build_services()

    console.print()
    console.print(f"[bold]{settings.shop_name}[/bold]", style="cyan")
    console.print()

    user = sign_in(user_service)
    if user is None:
        console.print("[bold]Goodbye![/bold]")
        return
    console.print(f"Signed in as [bold]{user.email}[/bold]  |  {format_long_date(today())}")

    while True:
        choice = questionary.select(
            "Main Menu",
            choices=[
                "Dashboard",
                "Invoices",
                "Create Invoice",
                "Customers",
                "Manage Users",
                "Exit",
            ],
        ).ask()

        if choice is None or choice == "Exit":
            console.print("[bold]Goodbye![/bold]")
            break
        elif choice == "Dashboard":
            show_dashboard(invoice_service, customer_service)
        elif choice == "Invoices":
            list_invoices_menu(invoice_service, customer_service)
        elif choice == "Create Invoice":
            invoice_form_menu(invoice_service, customer_service)
        elif choice == "Customers":
            customers_menu(customer_service)
        elif choice == "Manage Users":
            user_management_menu(user_service)
