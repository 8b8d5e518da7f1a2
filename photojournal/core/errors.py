"""
Typed failures raised by the access client and the photo repository.

Every error carries the human-readable message reported by the backend and
the HTTP status the API answers with.
"""

from typing import Any, Optional


class PhotoJournalError(Exception):
    status_code = 502

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        if status_code is not None:
            self.status_code = status_code


class ConfigurationError(PhotoJournalError):
    status_code = 503


class AuthorizationError(PhotoJournalError):
    status_code = 403


class NotFoundError(PhotoJournalError):
    status_code = 404


class ConflictError(PhotoJournalError):
    status_code = 409


class ValidationError(PhotoJournalError):
    status_code = 400


class TransportError(PhotoJournalError):
    status_code = 502


def extract_message(payload: Any, fallback: str = "Request failed") -> str:
    """Pull the most specific message out of a PostgREST, Storage or GoTrue error body."""
    if isinstance(payload, dict):
        for key in ("message", "msg", "error_description", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    return fallback


_STRUCTURED_KEYS = ("statusCode", "code", "error")
_MISSING_OBJECT_CODES = ("NoSuchKey", "PGRST116")


def _missing_bucket(payload: Any, message: str) -> bool:
    if isinstance(payload, dict):
        if payload.get("code") == "NoSuchBucket" or payload.get("error") == "Bucket not found":
            return True
        if any(k in payload for k in _STRUCTURED_KEYS):
            return False
    return "bucket not found" in message.lower()


def _looks_not_found(status: int, payload: Any, message: str) -> bool:
    if isinstance(payload, dict) and any(k in payload for k in _STRUCTURED_KEYS):
        # Only a missing object or row counts, whatever status Storage reports
        # alongside it; PostgREST uses PGRST116 when a single-row request matched nothing.
        return payload.get("error") == "not_found" or payload.get("code") in _MISSING_OBJECT_CODES
    if status == 404:
        return True
    # No structured kind exposed: fall back to the message text.
    return "not found" in message.lower()


def error_from_response(status: int, payload: Any) -> PhotoJournalError:
    """Map a failed backend response onto the error taxonomy."""
    message = extract_message(payload, fallback=f"Backend responded with HTTP {status}")
    code = None
    if isinstance(payload, dict):
        raw = payload.get("code") or payload.get("error")
        code = str(raw) if raw is not None else None
        inner = str(payload.get("statusCode", ""))
        if inner.isdigit() and status == 400:
            status = int(inner)

    if _missing_bucket(payload, message):
        return ConfigurationError(message, code=code)
    if _looks_not_found(status, payload, message):
        return NotFoundError(message, code=code)
    if status in (401, 403) or code == "42501":
        return AuthorizationError(message, status_code=status if status in (401, 403) else 403, code=code)
    if status == 409 or (isinstance(payload, dict) and payload.get("error") == "Duplicate"):
        return ConflictError(message, code=code)
    if 400 <= status < 500:
        return ValidationError(message, status_code=status, code=code)
    return PhotoJournalError(message, code=code)
