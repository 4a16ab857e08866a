"""
Gym Roster — Supabase Client & Store
Client records in a Supabase (PostgREST) table with unique constraints on
contact and aadhaar. Table DDL: backend/sql/clients.sql
"""

import re
from typing import Any, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import create_client, Client

from app.config import get_settings
from app.core.client_store import (
    UNIQUE_FIELDS,
    ClientStore,
    DuplicateKeyError,
    RecordNotFoundError,
    StoreError,
    StoreUnavailableError,
)
from app.utils.logger import logger

UNIQUE_VIOLATION = "23505"
INVALID_TEXT_REPRESENTATION = "22P02"   # malformed uuid in a filter

_KEY_DETAIL = re.compile(r"Key \((\w+)\)=")


def get_supabase_client() -> Client:
    """
    Build a Supabase client from settings.
    Uses the service role key for full table access (backend only).
    """
    settings = get_settings()
    if not settings.has_supabase_config:
        raise StoreUnavailableError("Supabase is not configured (SUPABASE_URL / key missing)")
    return create_client(
        supabase_url=settings.supabase_url,
        supabase_key=settings.supabase_service_role_key or settings.supabase_anon_key,
    )


# ══════════════════════════════════════════
# Row <-> document mapping
# ══════════════════════════════════════════

def document_to_row(document: dict) -> dict:
    height = document.get("height") or {}
    medical = document.get("medicalCondition") or {}
    fees = document.get("fees") or {}
    membership = document.get("membership") or {}
    return {
        "name": document["name"],
        "contact": document["contact"],
        "aadhaar": document["aadhaar"],
        "height_ft": height.get("ft"),
        "height_in": height.get("in"),
        "weight": document.get("weight"),
        "goal": document["goal"],
        "has_medical_condition": bool(medical.get("hasMedicalCondition")),
        "condition_details": medical.get("conditionDetails") or "",
        "fees_submitted": fees.get("submitted"),
        "fees_due": fees.get("due") or 0,
        "pt": document.get("pt") or "None",
        "membership_months": membership.get("months"),
        "fee_date": membership["feeDate"].isoformat(),
        "end_date": membership["endDate"].isoformat(),
    }


def row_to_document(row: dict) -> dict:
    return {
        "id": str(row["id"]),
        "name": row["name"],
        "contact": row["contact"],
        "aadhaar": row["aadhaar"],
        "height": {"ft": row.get("height_ft"), "in": row.get("height_in")},
        "weight": row.get("weight"),
        "goal": row["goal"],
        "medicalCondition": {
            "hasMedicalCondition": bool(row.get("has_medical_condition")),
            "conditionDetails": row.get("condition_details") or "",
        },
        "fees": {"submitted": row.get("fees_submitted"), "due": row.get("fees_due") or 0},
        "pt": row.get("pt") or "None",
        "membership": {
            "months": row.get("membership_months"),
            "feeDate": row.get("fee_date"),
            "endDate": row.get("end_date"),
        },
        "createdAt": row.get("created_at"),
        "updatedAt": row.get("updated_at"),
    }


def _duplicate_field(exc: APIError) -> str:
    text = f"{exc.details or ''} {exc.message or ''}"
    match = _KEY_DETAIL.search(text)
    if match and match.group(1) in UNIQUE_FIELDS:
        return match.group(1)
    for field in UNIQUE_FIELDS:
        if f"_{field}_" in text or f"({field})" in text:
            return field
    return "contact"


class SupabaseClientStore(ClientStore):
    """ClientStore over a Supabase table."""

    def __init__(self, client: Optional[Client] = None, table: Optional[str] = None):
        self._client = client or get_supabase_client()
        self._table = table or get_settings().clients_table

    @property
    def name(self) -> str:
        return "supabase"

    def _query(self):
        return self._client.table(self._table)

    def _execute(self, builder: Any, record_id: Optional[str] = None):
        """Run a PostgREST request, translating library errors into store errors."""
        try:
            return builder.execute()
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                raise DuplicateKeyError(_duplicate_field(exc), exc.message) from exc
            if exc.code == INVALID_TEXT_REPRESENTATION and record_id is not None:
                raise RecordNotFoundError(record_id) from exc
            raise StoreError(exc.message or str(exc)) from exc
        except httpx.TransportError as exc:
            logger.warning(f"⚠️ Supabase unreachable: {exc}")
            raise StoreUnavailableError(str(exc)) from exc

    def find_all(self) -> list[dict]:
        response = self._execute(self._query().select("*").order("created_at"))
        return [row_to_document(row) for row in response.data or []]

    def find_by_id(self, record_id: str) -> Optional[dict]:
        try:
            response = self._execute(
                self._query().select("*").eq("id", record_id).limit(1), record_id
            )
        except RecordNotFoundError:
            return None
        rows = response.data or []
        return row_to_document(rows[0]) if rows else None

    def insert(self, document: dict) -> dict:
        response = self._execute(self._query().insert(document_to_row(document)))
        rows = response.data or []
        if not rows:
            raise StoreError("Insert returned no row")
        return row_to_document(rows[0])

    def replace_by_id(self, record_id: str, document: dict) -> dict:
        row = document_to_row(document)
        response = self._execute(self._query().update(row).eq("id", record_id), record_id)
        rows = response.data or []
        if not rows:
            raise RecordNotFoundError(record_id)
        return row_to_document(rows[0])

    def delete_by_id(self, record_id: str) -> dict:
        response = self._execute(self._query().delete().eq("id", record_id), record_id)
        rows = response.data or []
        if not rows:
            raise RecordNotFoundError(record_id)
        return row_to_document(rows[0])

    def ping(self) -> bool:
        try:
            self._execute(self._query().select("id").limit(1))
            return True
        except StoreError as exc:
            logger.warning(f"Supabase health check failed: {exc}")
            return False
