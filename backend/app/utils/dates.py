"""
Gym Roster — Calendar helpers
"""

import calendar
from datetime import date, datetime
from zoneinfo import ZoneInfo


def today_in(tz_name: str) -> date:
    """Current calendar date in the given IANA timezone."""
    return datetime.now(ZoneInfo(tz_name)).date()


def add_months(start: date, months: int) -> date:
    """
    Advance the month field by `months`, clamping the day to the last day of
    the target month (Jan 31 + 1 month => Feb 28/29).
    """
    total = start.month - 1 + months
    year = start.year + total // 12
    month = total % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def parse_date(value) -> date:
    """
    Accept a date, a datetime, or an ISO string ("2024-01-31" or a full
    "2024-01-31T00:00:00.000Z" timestamp, truncated to its date part).
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if "T" in text:
            text = text.split("T", 1)[0]
        return date.fromisoformat(text)
    raise ValueError(f"Unsupported date value: {value!r}")


def format_display_date(value: date | None) -> str:
    """dd/mm/yyyy, the en-GB format the roster page shows."""
    if value is None:
        return "--/--/----"
    return value.strftime("%d/%m/%Y")
