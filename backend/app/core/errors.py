"""
Gym Roster — Service Error Taxonomy
Every failure leaving the service layer is one of these.
"""

from typing import Optional


class RosterError(Exception):
    """Base class. Carries the HTTP status and a stable error name."""

    status_code: int = 500
    error: str = "UnknownError"
    retryable: bool = False

    def __init__(self, message: str, field: Optional[str] = None, fields: Optional[list[str]] = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else ([field] if field else [])
        self.field = field or (self.fields[0] if self.fields else None)

    def to_dict(self) -> dict:
        body = {"message": self.message, "error": self.error}
        if self.field:
            body["field"] = self.field
        if len(self.fields) > 1:
            body["fields"] = self.fields
        return body


class ValidationError(RosterError):
    """Malformed, missing or out-of-range input. The caller must fix and resubmit."""
    status_code = 400
    error = "ValidationError"


class ConflictError(RosterError):
    """Uniqueness violation on contact or aadhaar."""
    status_code = 409
    error = "ConflictError"


class NotFoundError(RosterError):
    status_code = 404
    error = "NotFoundError"


class ServiceUnavailableError(RosterError):
    """Store unreachable. Safe to retry with backoff."""
    status_code = 503
    error = "ServiceUnavailable"
    retryable = True


class UnknownError(RosterError):
    status_code = 500
    error = "UnknownError"


_BY_NAME = {
    cls.error: cls
    for cls in (ValidationError, ConflictError, NotFoundError, ServiceUnavailableError, UnknownError)
}


def error_from_response(status_code: int, body: dict) -> RosterError:
    """Rebuild a RosterError from an error response body (used by the API client)."""
    message = body.get("message") or f"Request failed with status {status_code}"
    cls = _BY_NAME.get(body.get("error", ""))
    if cls is None:
        cls = {
            400: ValidationError,
            404: NotFoundError,
            409: ConflictError,
            502: ServiceUnavailableError,
            503: ServiceUnavailableError,
            504: ServiceUnavailableError,
        }.get(status_code, UnknownError)
    return cls(message, field=body.get("field"), fields=body.get("fields"))
