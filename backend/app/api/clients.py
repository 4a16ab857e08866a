"""
Gym Roster — Clients API Router
Single resource: list, create, replace and delete member records, plus the
roster, details-panel and end-date-preview views.
PUT and DELETE take the id in the JSON body (or ?id= for older pages).
"""

import json
from datetime import date
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.core.client_store import ClientStore
from app.core.errors import ValidationError
from app.services.client_service import ClientService
from app.services.roster_view import build_roster, client_details, end_date_preview, whatsapp_link
from app.utils.dates import parse_date, today_in

router = APIRouter()


# ── Dependencies ──

def get_store(request: Request) -> ClientStore:
    """Shared store from the provider created at startup (raises ServiceUnavailable)."""
    return request.app.state.store_provider.get()


def get_clock() -> Callable[[], date]:
    tz = get_settings().roster_timezone
    return lambda: today_in(tz)


def get_client_service(
    store: ClientStore = Depends(get_store),
    clock: Callable[[], date] = Depends(get_clock),
) -> ClientService:
    return ClientService(store, today=clock)


async def _read_body(request: Request):
    """Parsed JSON body, or None when empty. Non-object bodies are rejected by the service."""
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError("Request body is not valid JSON.", field="body") from exc


def _id_from(body, query_id: Optional[str]) -> Optional[str]:
    if query_id:
        return query_id
    if isinstance(body, dict):
        return body.get("id")
    return None


# ── Routes ──

@router.get("")
async def list_clients(service: ClientService = Depends(get_client_service)):
    """Every record; search and sorting are done by the page (or /roster)."""
    return [c.to_response() for c in service.list_clients()]


@router.get("/roster")
async def roster(
    search: str = Query("", description="Case-insensitive name filter"),
    service: ClientService = Depends(get_client_service),
):
    """Render-ready rows sorted by days remaining."""
    settings = get_settings()
    result = build_roster(
        service.list_clients(),
        today=service.today(),
        search=search,
        country_code=settings.whatsapp_country_code,
    )
    return result.to_dict()


@router.get("/end-date-preview")
async def end_date_preview_hint(
    fee_date: str = Query("", alias="feeDate"),
    months: str = Query(""),
):
    """Form hint while typing; unparseable input yields the placeholder."""
    try:
        start = parse_date(fee_date) if fee_date.strip() else None
        term = int(months) if months.strip() else None
    except ValueError:
        start, term = None, None
    return {"endDate": end_date_preview(start, term)}


@router.get("/{client_id}")
async def get_client(client_id: str, service: ClientService = Depends(get_client_service)):
    return service.get_client(client_id).to_response()


@router.get("/{client_id}/details")
async def get_client_details(client_id: str, service: ClientService = Depends(get_client_service)):
    """Label/value pairs for the details panel."""
    record = service.get_client(client_id)
    return {
        "id": record.id,
        "name": record.name,
        "details": [{"label": label, "value": value} for label, value in client_details(record)],
        "whatsappUrl": whatsapp_link(record, get_settings().whatsapp_country_code),
    }


@router.post("")
async def create_client(request: Request, service: ClientService = Depends(get_client_service)):
    body = await _read_body(request)
    created = service.create_client(body)
    return JSONResponse(status_code=201, content=created.to_response())


@router.put("")
async def replace_client(
    request: Request,
    id: Optional[str] = Query(None),
    service: ClientService = Depends(get_client_service),
):
    body = await _read_body(request)
    updated = service.replace_client(_id_from(body, id), body)
    return updated.to_response()


@router.delete("")
async def delete_client(
    request: Request,
    id: Optional[str] = Query(None),
    service: ClientService = Depends(get_client_service),
):
    body = await _read_body(request)
    result = service.delete_client(_id_from(body, id))
    return result.model_dump(by_alias=True)
