"""
Gym Roster — Client Record Store Interface
Persistence contract for client documents, plus an in-memory implementation.

Documents are nested dicts in the record's wire shape (see ClientInput.to_document).
Stores assign `id`, `createdAt` and `updatedAt`.
"""

import copy
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional

UNIQUE_FIELDS = ("contact", "aadhaar")


# ══════════════════════════════════════════
# Store errors
# ══════════════════════════════════════════

class StoreError(Exception):
    """Any store failure not covered by a more specific subclass."""


class DuplicateKeyError(StoreError):
    """A unique field collided with an existing record."""

    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"Duplicate value for unique field '{field}'")
        self.field = field


class RecordNotFoundError(StoreError):
    def __init__(self, record_id: str):
        super().__init__(f"No record with id '{record_id}'")
        self.record_id = record_id


class StoreUnavailableError(StoreError):
    """The backing database could not be reached."""


# ══════════════════════════════════════════
# Interface
# ══════════════════════════════════════════

class ClientStore(ABC):
    """Base class for client record stores."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Store name for logging and health output."""
        ...

    @abstractmethod
    def find_all(self) -> list[dict]:
        ...

    @abstractmethod
    def find_by_id(self, record_id: str) -> Optional[dict]:
        ...

    @abstractmethod
    def insert(self, document: dict) -> dict:
        """Persist a new record. Raises DuplicateKeyError."""
        ...

    @abstractmethod
    def replace_by_id(self, record_id: str, document: dict) -> dict:
        """Overwrite every field of an existing record. Raises RecordNotFoundError, DuplicateKeyError."""
        ...

    @abstractmethod
    def delete_by_id(self, record_id: str) -> dict:
        """Remove a record and return it. Raises RecordNotFoundError."""
        ...

    def ping(self) -> bool:
        """Health check; True when the store answers."""
        return True

    def close(self) -> None:
        return None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryClientStore(ClientStore):
    """Dict-backed store. Resets on restart; used for development and tests."""

    def __init__(self):
        self._records: dict[str, dict] = {}
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "memory"

    def find_all(self) -> list[dict]:
        with self._lock:
            return [copy.deepcopy(r) for r in self._records.values()]

    def find_by_id(self, record_id: str) -> Optional[dict]:
        with self._lock:
            record = self._records.get(record_id)
            return copy.deepcopy(record) if record else None

    def insert(self, document: dict) -> dict:
        with self._lock:
            self._check_unique(document)
            now = _utcnow()
            record = copy.deepcopy(document)
            record.update(id=uuid.uuid4().hex, createdAt=now, updatedAt=now)
            self._records[record["id"]] = record
            return copy.deepcopy(record)

    def replace_by_id(self, record_id: str, document: dict) -> dict:
        with self._lock:
            existing = self._records.get(record_id)
            if existing is None:
                raise RecordNotFoundError(record_id)
            self._check_unique(document, exclude_id=record_id)
            record = copy.deepcopy(document)
            record.update(id=record_id, createdAt=existing["createdAt"], updatedAt=_utcnow())
            self._records[record_id] = record
            return copy.deepcopy(record)

    def delete_by_id(self, record_id: str) -> dict:
        with self._lock:
            record = self._records.pop(record_id, None)
            if record is None:
                raise RecordNotFoundError(record_id)
            return record

    def _check_unique(self, document: dict, exclude_id: Optional[str] = None) -> None:
        for field in UNIQUE_FIELDS:
            value = document.get(field)
            for rid, record in self._records.items():
                if rid != exclude_id and record.get(field) == value:
                    raise DuplicateKeyError(field)
