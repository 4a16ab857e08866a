"""
Gym Roster — Client Service
Validates request bodies, derives membership dates and runs CRUD against the
store. Store errors are translated into app.core.errors before they leave here.
"""

from contextlib import contextmanager
from datetime import date
from typing import Callable, Optional

import pydantic

from app.core.client_store import (
    ClientStore,
    DuplicateKeyError,
    RecordNotFoundError,
    StoreError,
    StoreUnavailableError,
)
from app.core.errors import (
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
    UnknownError,
    ValidationError,
)
from app.models.client import ClientInput, ClientRecord, DeleteResponse, DeletedClient
from app.services.membership import compute_end_date
from app.utils.logger import logger
from app.utils.security import mask_aadhaar, mask_contact

CONFLICT_MESSAGES = {
    "contact": "A client with this contact number already exists.",
    "aadhaar": "A client with this Aadhaar number already exists.",
}

_FIELD_LABELS = {
    "name": "Name",
    "contact": "Contact number",
    "aadhaar": "Aadhaar number",
    "goal": "Goal",
    "feesSubmitted": "Fees submitted",
    "feesDue": "Fees due",
    "heightFt": "Height (ft)",
    "heightIn": "Height (in)",
    "weight": "Weight",
    "pt": "Personal training",
    "months": "Membership months",
    "feeDate": "Fee date",
}


def _format_validation_error(exc: pydantic.ValidationError) -> ValidationError:
    """Collapse pydantic's error list into one ValidationError naming every field."""
    fields: list[str] = []
    messages: list[str] = []
    for err in exc.errors():
        field = str(err["loc"][-1]) if err["loc"] else "body"
        if field not in fields:
            fields.append(field)
        label = _FIELD_LABELS.get(field, field)
        if err["type"] == "missing":
            messages.append(f"{label} is required")
        elif err["type"] == "value_error":
            msg = err["msg"].removeprefix("Value error, ")
            messages.append(msg if msg[:1].isupper() else f"{label} {msg}")
        else:
            messages.append(f"{label}: {err['msg']}")
    return ValidationError("; ".join(messages), fields=fields)


@contextmanager
def _translate_store_errors(action: str):
    try:
        yield
    except DuplicateKeyError as exc:
        raise ConflictError(
            CONFLICT_MESSAGES.get(exc.field, "A client with these details already exists."),
            field=exc.field,
        ) from exc
    except RecordNotFoundError as exc:
        raise NotFoundError("Client not found.") from exc
    except StoreUnavailableError as exc:
        raise ServiceUnavailableError("Client database is unavailable. Please try again shortly.") from exc
    except StoreError as exc:
        logger.error(f"❌ Store error while {action}: {exc}")
        raise UnknownError(f"Error {action}.") from exc


class ClientService:
    """Stateless per request; holds only the shared store handle and a clock."""

    def __init__(self, store: ClientStore, today: Callable[[], date] = date.today):
        self.store = store
        self.today = today

    def validate(self, body: Optional[dict]) -> ClientInput:
        if not isinstance(body, dict):
            raise ValidationError("Request body must be a JSON object.", field="body")
        try:
            return ClientInput.model_validate(body, context={"today": self.today()})
        except pydantic.ValidationError as exc:
            raise _format_validation_error(exc) from exc

    def _build_document(self, body: Optional[dict]) -> dict:
        data = self.validate(body)
        return data.to_document(compute_end_date(data.fee_date, data.months))

    # ── Operations ──

    def list_clients(self) -> list[ClientRecord]:
        with _translate_store_errors("fetching clients"):
            documents = self.store.find_all()
        return [ClientRecord.model_validate(d) for d in documents]

    def get_client(self, client_id: Optional[str]) -> ClientRecord:
        client_id = _require_id(client_id)
        with _translate_store_errors("fetching client"):
            document = self.store.find_by_id(client_id)
        if document is None:
            raise NotFoundError("Client not found.")
        return ClientRecord.model_validate(document)

    def create_client(self, body: Optional[dict]) -> ClientRecord:
        document = self._build_document(body)
        with _translate_store_errors("creating client"):
            created = self.store.insert(document)
        logger.info(
            f"👤 Client created: {created['id']} "
            f"(contact {mask_contact(created['contact'])}, aadhaar {mask_aadhaar(created['aadhaar'])})"
        )
        return ClientRecord.model_validate(created)

    def replace_client(self, client_id: Optional[str], body: Optional[dict]) -> ClientRecord:
        client_id = _require_id(client_id, "Client ID is required for update.")
        document = self._build_document(body)
        with _translate_store_errors("updating client"):
            updated = self.store.replace_by_id(client_id, document)
        logger.info(f"✏️ Client updated: {client_id}")
        return ClientRecord.model_validate(updated)

    def delete_client(self, client_id: Optional[str]) -> DeleteResponse:
        client_id = _require_id(client_id, "Client ID is required for delete.")
        with _translate_store_errors("deleting client"):
            deleted = self.store.delete_by_id(client_id)
        logger.info(f"🗑️ Client deleted: {client_id}")
        return DeleteResponse(
            message="Client deleted successfully.",
            deleted_client=DeletedClient(id=str(deleted["id"]), name=deleted["name"]),
        )


def _require_id(client_id, message: str = "Client ID is required.") -> str:
    if client_id is None or not str(client_id).strip():
        raise ValidationError(message, field="id")
    return str(client_id).strip()
