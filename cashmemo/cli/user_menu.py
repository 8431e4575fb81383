from __future__ import annotations

import questionary
from rich.console import Console
from rich.table import Table

from cashmemo.services.user_service import UserService

console = Console()


def user_management_menu(user_service: UserService) -> None:
    while True:
        choice = questionary.select(
            "Manage Users",
            choices=[
                "Create User",
                "Change Password",
                "List Users",
                "Back",
            ],
        ).ask()

        if choice is None or choice == "Back":
            break
        elif choice == "Create User":
            create_user(user_service)
        elif choice == "Change Password":
            _change_password(user_service)
        elif choice == "List Users":
            _list_users(user_service)


def create_user(user_service: UserService) -> None:
    console.print()
    console.print("[bold]New User[/bold]", style="cyan")

    email = questionary.text("Email:").ask()
    if not email:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    password = questionary.password("Password:").ask()
    if not password:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    confirm = questionary.password("Confirm password:").ask()
    if password != confirm:
        console.print("[red]Passwords do not match.[/red]")
        return

    try:
        user = user_service.create_user(email, password)
        console.print(f"[green bold]User '{user.email}' created![/green bold]")
    except Exception as e:
        console.print(f"[red]Failed to create user: {e}[/red]")


def _change_password(user_service: UserService) -> None:
    console.print()
    console.print("[bold]Change Password[/bold]", style="cyan")

    users = user_service.list_users()
    if not users:
        console.print("[yellow]No users registered.[/yellow]")
        return

    choices = [u.email for u in users] + ["Back"]
    email = questionary.select("Select user:", choices=choices).ask()
    if email is None or email == "Back":
        return

    password = questionary.password("New password:").ask()
    if not password:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    confirm = questionary.password("Confirm new password:").ask()
    if password != confirm:
        console.print("[red]Passwords do not match.[/red]")
        return

    user_service.change_password(email, password)
    console.print(f"[green bold]Password changed for '{email}'.[/green bold]")


def _list_users(user_service: UserService) -> None:
    users = user_service.list_users()

    if not users:
        console.print("[yellow]No users registered.[/yellow]")
        return

    table = Table(title="Users")
    table.add_column("#", style="dim")
    table.add_column("Email", style="bold")
    table.add_column("Created")

    for u in users:
        created = u.created_at.strftime("%d/%m/%Y %H:%M") if u.created_at else "-"
        table.add_row(str(u.id), u.email, created)

    console.print()
    console.print(table)
    console.print()
