"""
Gym Roster — Roster View
Everything the roster page needs to render, computed server-side:
urgency ordering, status badges, details panel and WhatsApp reminder link.
"""

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Optional
from urllib.parse import quote

from app.models.client import MAX_MEMBERSHIP_MONTHS, ClientRecord, PTTier
from app.services.membership import compute_end_date, membership_status
from app.utils.dates import format_display_date


@dataclass
class RosterRow:
    """One line of the roster list."""
    id: str
    name: str
    subheading: str
    days_remaining: int
    is_overdue: bool
    has_fee_due: bool
    days_badge: str
    fee_due_badge: Optional[str] = None
    pt_badge: Optional[str] = None
    whatsapp_url: str = ""


@dataclass
class Roster:
    rows: list[RosterRow] = field(default_factory=list)
    count: int = 0
    total: int = 0

    @property
    def label(self) -> str:
        return f"{self.count} of {self.total} Client{'s' if self.total != 1 else ''}"

    def to_dict(self) -> dict:
        return {
            "rows": [asdict(r) for r in self.rows],
            "count": self.count,
            "total": self.total,
            "label": self.label,
        }


def format_currency(amount: float) -> str:
    return f"₹{(amount or 0):.2f}"


def days_badge(days: int) -> str:
    return f"{abs(days)}d overdue" if days < 0 else f"{days}d left"


def whatsapp_link(record: ClientRecord, country_code: str = "91") -> str:
    """wa.me deep link with a pre-filled renewal reminder."""
    end = format_display_date(record.membership.end_date)
    message = (
        f"Hello {record.name}, this is a reminder from the gym. "
        f"Your membership ends on {end}."
    )
    if record.fees.due > 0:
        message += f" Pending fee: {format_currency(record.fees.due)}."
    return f"https://wa.me/{country_code}{record.contact}?text={quote(message)}"


def build_row(record: ClientRecord, today: date, country_code: str = "91") -> RosterRow:
    status = membership_status(record.membership.end_date, record.fees.due, today)
    subheading = f"{record.contact} • {record.goal}"
    pt_badge = None
    if record.pt != PTTier.NONE.value:
        pt_badge = f"PT: {record.pt}"
    return RosterRow(
        id=record.id,
        name=record.name,
        subheading=subheading,
        days_remaining=status.days_remaining,
        is_overdue=status.is_overdue,
        has_fee_due=status.has_fee_due,
        days_badge=days_badge(status.days_remaining),
        fee_due_badge=f"Due: {format_currency(record.fees.due)}" if status.has_fee_due else None,
        pt_badge=pt_badge,
        whatsapp_url=whatsapp_link(record, country_code),
    )


def build_roster(
    records: list[ClientRecord],
    today: date,
    search: str = "",
    country_code: str = "91",
) -> Roster:
    """Filter by name (case-insensitive substring) and sort by days remaining, most urgent first."""
    term = (search or "").strip().lower()
    matched = [r for r in records if term in r.name.lower()]
    rows = sorted(
        (build_row(r, today, country_code) for r in matched),
        key=lambda row: row.days_remaining,
    )
    return Roster(rows=rows, count=len(rows), total=len(records))


def client_details(record: ClientRecord) -> list[tuple[str, str]]:
    """Label/value pairs for the details panel, in display order."""
    height = record.height
    height_text = f"{height.ft}'{height.inches or 0}\"" if height.ft is not None else "-"
    weight_text = f"{record.weight:g}kg" if record.weight is not None else "-"
    medical = record.medical_condition
    return [
        ("Contact", record.contact),
        ("Aadhaar No.", record.aadhaar),
        ("Goal", record.goal),
        ("Height", height_text),
        ("Weight", weight_text),
        ("Medical Condition", (medical.condition_details or "Yes") if medical.has_medical_condition else "None"),
        ("Fee Submitted", format_currency(record.fees.submitted)),
        ("Fee Due", format_currency(record.fees.due)),
        ("Personal Training", record.pt),
        ("Membership", f"{record.membership.months} Months"),
        ("Start Date", format_display_date(record.membership.fee_date)),
        ("End Date", format_display_date(record.membership.end_date)),
    ]


def end_date_preview(fee_date: Optional[date], months: Optional[int]) -> str:
    """Live end-date hint for the form; placeholder until both inputs are set."""
    if fee_date is None or not months or not 1 <= months <= MAX_MEMBERSHIP_MONTHS:
        return format_display_date(None)
    return format_display_date(compute_end_date(fee_date, months))
