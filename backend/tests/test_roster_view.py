from datetime import date
from urllib.parse import unquote

from app.models.client import ClientRecord
from app.services.roster_view import (
    build_roster,
    client_details,
    days_badge,
    end_date_preview,
    whatsapp_link,
)

TODAY = date(2024, 3, 15)


def _record(rid, name, end, due=0.0, pt="None", contact="9876543210"):
    return ClientRecord.model_validate({
        "id": rid,
        "name": name,
        "contact": contact,
        "aadhaar": "123412341234",
        "height": {"ft": 5, "in": 9},
        "weight": 72.5,
        "goal": "Bodybuilding",
        "medicalCondition": {"hasMedicalCondition": True, "conditionDetails": "Asthma"},
        "fees": {"submitted": 1500, "due": due},
        "pt": pt,
        "membership": {"months": 1, "feeDate": "2024-02-15", "endDate": end},
    })


def test_rows_sorted_by_urgency():
    records = [
        _record("a", "Later", "2024-04-30"),
        _record("b", "Overdue", "2024-03-10"),
        _record("c", "Today", "2024-03-15"),
    ]
    roster = build_roster(records, TODAY)
    assert [r.name for r in roster.rows] == ["Overdue", "Today", "Later"]
    assert [r.days_badge for r in roster.rows] == ["5d overdue", "0d left", "46d left"]
    assert roster.rows[0].is_overdue is True
    assert roster.rows[1].is_overdue is False


def test_search_filters_by_name_case_insensitive():
    records = [_record("a", "Asha Rani", "2024-04-01"), _record("b", "Ravi", "2024-04-01")]
    roster = build_roster(records, TODAY, search="  ASHA ")
    assert [r.name for r in roster.rows] == ["Asha Rani"]
    assert roster.label == "1 of 2 Clients"


def test_label_singular():
    assert build_roster([_record("a", "Solo", "2024-04-01")], TODAY).label == "1 of 1 Client"


def test_badges():
    row = build_roster([_record("a", "Ravi", "2024-04-01", due=250, pt="Advanced")], TODAY).rows[0]
    assert row.fee_due_badge == "Due: ₹250.00"
    assert row.pt_badge == "PT: Advanced"
    assert row.subheading == "9876543210 • Bodybuilding"

    plain = build_roster([_record("a", "Ravi", "2024-04-01")], TODAY).rows[0]
    assert plain.fee_due_badge is None
    assert plain.pt_badge is None


def test_days_badge():
    assert days_badge(-1) == "1d overdue"
    assert days_badge(0) == "0d left"


def test_whatsapp_link_uses_contact_name_and_end_date():
    url = whatsapp_link(_record("a", "Ravi", "2024-02-29", due=100), country_code="91")
    assert url.startswith("https://wa.me/919876543210?text=")
    text = unquote(url.split("text=", 1)[1])
    assert "Hello Ravi" in text
    assert "29/02/2024" in text
    assert "₹100.00" in text


def test_client_details():
    details = dict(client_details(_record("a", "Ravi", "2024-03-15")))
    assert details["Height"] == "5'9\""
    assert details["Weight"] == "72.5kg"
    assert details["Medical Condition"] == "Asthma"
    assert details["Fee Submitted"] == "₹1500.00"
    assert details["Membership"] == "1 Months"
    assert details["End Date"] == "15/03/2024"


def test_end_date_preview():
    assert end_date_preview(date(2024, 1, 31), 1) == "29/02/2024"
    assert end_date_preview(None, 3) == "--/--/----"
    assert end_date_preview(date(2024, 1, 31), None) == "--/--/----"
    assert end_date_preview(date(2024, 1, 31), 200000) == "--/--/----"
