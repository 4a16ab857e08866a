"""
Gym Roster — Membership Lifecycle
End-date arithmetic and the derived fee/expiry status shown on the roster.
Derived values are computed at read time and never stored.
"""

from dataclasses import dataclass
from datetime import date

from app.utils.dates import add_months


def compute_end_date(fee_date: date, months: int) -> date:
    """
    Membership expiry: fee date advanced by `months` calendar months.
    Days that don't exist in the target month clamp to its last day,
    so 2024-01-31 + 1 month is 2024-02-29.
    """
    if months < 1:
        raise ValueError("months must be a positive integer")
    return add_months(fee_date, months)


def days_remaining(end_date: date, today: date) -> int:
    """Signed whole days from today to end_date. 0 on the last day, -1 the day after."""
    return (end_date - today).days


@dataclass(frozen=True)
class MembershipStatus:
    days_remaining: int
    is_overdue: bool
    has_fee_due: bool


def membership_status(end_date: date, fees_due: float, today: date) -> MembershipStatus:
    remaining = days_remaining(end_date, today)
    return MembershipStatus(
        days_remaining=remaining,
        is_overdue=remaining < 0,
        has_fee_due=(fees_due or 0) > 0,
    )
