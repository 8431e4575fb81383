from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENTS = Decimal("0.01")


def to_money(value: Decimal | int | float | str | None) -> Decimal:
    """Quantize to 2 places. None counts as zero."""
    if value is None:
        return Decimal("0.00")
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_taka(amount: Decimal | int | float, symbol: str = "Tk") -> str:
    """Format an amount with thousands separators: 1234.5 -> 'Tk 1,234.50'"""
    money = to_money(amount)
    sign = "-" if money < 0 else ""
    return f"{sign}{symbol} {abs(money):,.2f}"


def parse_amount(text: str | None) -> Decimal | None:
    """Parse a non-negative amount typed into a form. Returns None on invalid input.

    Accepts formats like '1200', '1200.5', '1,200.50'. Blank, non-numeric,
    non-finite and negative input all return None; callers decide whether a
    blank field means zero.
    """
    if text is None:
        return None
    text = text.strip().replace(",", "")
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    if not value.is_finite() or value < 0:
        return None
    return value
