from calendar import monthrange
from datetime import date, datetime

ACCEPTED_FORMATS = ("%Y-%m-%d", "%m/%d/%Y")


def parse_date(raw_date) -> date:
    """Accept a date, datetime, ISO ``YYYY-MM-DD`` or bank-style ``MM/DD/YYYY`` string."""
    if isinstance(raw_date, datetime):
        return raw_date.date()
    if isinstance(raw_date, date):
        return raw_date
    if not isinstance(raw_date, str) or not raw_date.strip():
        raise ValueError(f"unparseable date: {raw_date!r}")

    value = raw_date.strip()
    # timestamps coming back from the store, e.g. 2025-01-31T00:00:00
    if "T" in value:
        value = value.split("T", 1)[0]
    for fmt in ACCEPTED_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"unparseable date: {raw_date!r}")


def add_months(anchor: date, months: int) -> date:
    """Calendar month arithmetic; clamps to the last day of a shorter month."""
    month_index = anchor.month - 1 + months
    year = anchor.year + month_index // 12
    month = month_index % 12 + 1
    last_day = monthrange(year, month)[1]
    return date(year, month, min(anchor.day, last_day))


def format_date(value: date) -> str:
    return value.strftime("%b %d, %Y")


def format_relative_date(value: date, today: date) -> str:
    diff_days = (value - today).days

    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Tomorrow"
    if diff_days == -1:
        return "Yesterday"
    if diff_days > 0:
        return f"In {diff_days} days"
    return f"{abs(diff_days)} days ago"
