from datetime import date
from unittest.mock import MagicMock

import httpx
import pytest
from postgrest.exceptions import APIError

from app.core.client_store import (
    DuplicateKeyError,
    RecordNotFoundError,
    StoreError,
    StoreUnavailableError,
)
from app.core.supabase_client import SupabaseClientStore, document_to_row, row_to_document

ROW = {
    "id": "0b6f4c7e-2f7c-4a3e-9a53-0c1e2d3f4a5b",
    "name": "Ravi Kumar",
    "contact": "9876543210",
    "aadhaar": "123412341234",
    "height_ft": 5,
    "height_in": 9,
    "weight": 72.5,
    "goal": "Lose Weight",
    "has_medical_condition": False,
    "condition_details": "",
    "fees_submitted": 1500,
    "fees_due": 0,
    "pt": "None",
    "membership_months": 1,
    "fee_date": "2024-01-31",
    "end_date": "2024-02-29",
    "created_at": "2024-01-31T10:00:00+00:00",
    "updated_at": "2024-01-31T10:00:00+00:00",
}


def _document():
    doc = row_to_document(ROW)
    for key in ("id", "createdAt", "updatedAt"):
        doc.pop(key)
    doc["membership"]["feeDate"] = date(2024, 1, 31)
    doc["membership"]["endDate"] = date(2024, 2, 29)
    return doc


@pytest.fixture
def table():
    return MagicMock()


@pytest.fixture
def supa_store(table):
    client = MagicMock()
    client.table.return_value = table
    return SupabaseClientStore(client=client, table="clients")


def _respond(builder, rows):
    response = MagicMock()
    response.data = rows
    builder.execute.return_value = response


def test_row_mapping_round_trip():
    row = document_to_row(_document())
    assert row["fee_date"] == "2024-01-31"
    assert row["end_date"] == "2024-02-29"
    assert row["height_in"] == 9
    assert "id" not in row


def test_find_all(supa_store, table):
    _respond(table.select.return_value.order.return_value, [ROW])
    docs = supa_store.find_all()
    assert docs[0]["membership"]["endDate"] == "2024-02-29"
    assert docs[0]["height"] == {"ft": 5, "in": 9}
    table.select.return_value.order.assert_called_with("created_at")


def test_find_by_id_missing(supa_store, table):
    _respond(table.select.return_value.eq.return_value.limit.return_value, [])
    assert supa_store.find_by_id("0b6f4c7e-2f7c-4a3e-9a53-0c1e2d3f4a5b") is None


def test_find_by_malformed_id_is_none(supa_store, table):
    builder = table.select.return_value.eq.return_value.limit.return_value
    builder.execute.side_effect = APIError(
        {"message": "invalid input syntax for type uuid", "code": "22P02", "hint": None, "details": None}
    )
    assert supa_store.find_by_id("not-a-uuid") is None


def test_insert_duplicate_names_field(supa_store, table):
    table.insert.return_value.execute.side_effect = APIError({
        "message": 'duplicate key value violates unique constraint "clients_aadhaar_key"',
        "code": "23505",
        "hint": None,
        "details": "Key (aadhaar)=(123412341234) already exists.",
    })
    with pytest.raises(DuplicateKeyError) as exc:
        supa_store.insert(_document())
    assert exc.value.field == "aadhaar"


def test_replace_missing_raises_not_found(supa_store, table):
    _respond(table.update.return_value.eq.return_value, [])
    with pytest.raises(RecordNotFoundError):
        supa_store.replace_by_id(ROW["id"], _document())


def test_delete_returns_deleted_document(supa_store, table):
    _respond(table.delete.return_value.eq.return_value, [ROW])
    assert supa_store.delete_by_id(ROW["id"])["name"] == "Ravi Kumar"


def test_transport_error_is_unavailable(supa_store, table):
    table.select.return_value.order.return_value.execute.side_effect = httpx.ConnectError("refused")
    with pytest.raises(StoreUnavailableError):
        supa_store.find_all()


def test_other_api_errors_are_store_errors(supa_store, table):
    table.insert.return_value.execute.side_effect = APIError(
        {"message": "permission denied", "code": "42501", "hint": None, "details": None}
    )
    with pytest.raises(StoreError) as exc:
        supa_store.insert(_document())
    assert not isinstance(exc.value, (DuplicateKeyError, StoreUnavailableError))


def test_ping(supa_store, table):
    _respond(table.select.return_value.limit.return_value, [])
    assert supa_store.ping() is True
    table.select.return_value.limit.return_value.execute.side_effect = httpx.ReadTimeout("slow")
    assert supa_store.ping() is False
