from datetime import date, datetime
from zoneinfo import ZoneInfo

DHAKA_TZ = ZoneInfo("Asia/Dhaka")

STATUS_LABELS = {"paid": "Paid", "partial": "Partial", "unpaid": "Due"}


def today() -> date:
    return datetime.now(DHAKA_TZ).date()


def _coerce_date(value: date | str | None) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(value).date()
    except ValueError:
        return None


def format_display_date(value: date | str | None) -> str:
    """'2025-03-07' -> '07/03/2025'. Unparseable strings are returned as-is."""
    if value is None or value == "":
        return "N/A"
    parsed = _coerce_date(value)
    if parsed is None:
        return str(value)
    return parsed.strftime("%d/%m/%Y")


def format_long_date(value: date | str | None) -> str:
    """'2025-03-07' -> '7 March 2025'."""
    if value is None or value == "":
        return ""
    parsed = _coerce_date(value)
    if parsed is None:
        return str(value)
    return f"{parsed.day} {parsed.strftime('%B %Y')}"
