"""Render currency amounts as English words on the South-Asian scale.

    >>> amount_to_words(1234.5)
    'One Thousand Two Hundred and Thirty Four and Fifty Paisa Taka Only.'

Scale units: Hundred, Thousand (10^3), Lakh (10^5), Crore (10^7). The crore
count is itself rendered on the same scale, so very large amounts read as
e.g. "One Hundred Crore".
"""

from __future__ import annotations

from decimal import Decimal

from cashmemo.models import to_money

ZERO_WORDS = "Zero Only."

_UNITS = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine"]
_TEENS = [
    "Ten",
    "Eleven",
    "Twelve",
    "Thirteen",
    "Fourteen",
    "Fifteen",
    "Sixteen",
    "Seventeen",
    "Eighteen",
    "Nineteen",
]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

CRORE = 10_000_000
LAKH = 100_000
THOUSAND = 1_000


def _below_hundred(n: int) -> str:
    if n < 10:
        return _UNITS[n]
    if n < 20:
        return _TEENS[n - 10]
    return _TENS[n // 10] + (" " + _UNITS[n % 10] if n % 10 else "")


def _below_thousand(n: int) -> str:
    if n < 100:
        return _below_hundred(n)
    words = _UNITS[n // 100] + " Hundred"
    if n % 100:
        words += " and " + _below_hundred(n % 100)
    return words


def integer_to_words(n: int) -> str:
    """Words for a non-negative integer; empty string for 0."""
    parts: list[str] = []
    if n >= CRORE:
        parts.append(integer_to_words(n // CRORE) + " Crore")
        n %= CRORE
    if n >= LAKH:
        parts.append(_below_thousand(n // LAKH) + " Lakh")
        n %= LAKH
    if n >= THOUSAND:
        parts.append(_below_thousand(n // THOUSAND) + " Thousand")
        n %= THOUSAND
    if n:
        parts.append(_below_thousand(n))
    return " ".join(parts)


def amount_to_words(
    amount: Decimal | int | float | str,
    currency_unit: str = "Taka",
    minor_unit: str = "Paisa",
) -> str:
    money = to_money(amount)
    if money < 0:
        raise ValueError(f"Cannot render a negative amount in words: {money}")
    if money == 0:
        return ZERO_WORDS

    integer_part = int(money)
    fraction_part = int((money - integer_part) * 100)

    words = integer_to_words(integer_part)
    if fraction_part:
        minor = f"{_below_hundred(fraction_part)} {minor_unit}"
        words = f"{words} and {minor}" if words else minor
    return f"{words} {currency_unit} Only."
