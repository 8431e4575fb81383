from __future__ import annotations

from decimal import Decimal

import questionary
from rich.console import Console

from cashmemo.models import format_taka, parse_amount

console = Console()


def format_amount_input(amount: Decimal) -> str:
    """Format an amount for use as a default input value: 1200 -> '1200.00'"""
    return f"{amount:.2f}"


def prompt_amount(label: str, default: str = "", allow_blank: bool = True) -> Decimal | None:
    """Ask until the input parses. Blank returns None when allowed."""
    while True:
        val = questionary.text(label, default=default).ask()
        if val is None:
            return None
        if not val.strip() and allow_blank:
            return None
        parsed = parse_amount(val)
        if parsed is not None:
            return parsed
        console.print("[red]Invalid amount. Try again.[/red]")


def render_balance(amount: Decimal) -> str:
    """Positive balances are dues; negative ones are credit on file."""
    if amount > 0:
        return f"[red]Previous due: {format_taka(amount)}[/red]"
    if amount < 0:
        return f"[green]Advance deposit: {format_taka(abs(amount))}[/green]"
    return "[dim]No previous due[/dim]"
