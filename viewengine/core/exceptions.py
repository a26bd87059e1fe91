# File: /viewengine/core/exceptions.py | Version: 1.0 | Title: Error taxonomy shared by engine, service and gateway
from __future__ import annotations

from typing import Any, Dict, Optional


class ViewEngineError(Exception):
    """Base class for every error the engine raises on purpose.

    ``code`` is stable and travels over HTTP so the client gateway can
    rebuild the same exception class on the other side.
    """

    code = "view_engine_error"
    status_code = 500

    def __init__(self, message: str = "", **context: Any):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        self.context = context

    def to_payload(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class ValidationError(ViewEngineError):
    """Illegal operator, ceiling exceeded, malformed column state, ..."""

    code = "validation_error"
    status_code = 400


class FallbackViewRequired(ValidationError):
    """Deleting the view would leave the entity type without a pinned/default view."""

    code = "fallback_required"
    status_code = 409


class PermissionDenied(ViewEngineError):
    code = "permission_denied"
    status_code = 403
    suggestion = "clone"

    def to_payload(self) -> Dict[str, Any]:
        payload = super().to_payload()
        payload["suggestion"] = self.suggestion
        return payload


class NotFoundError(ViewEngineError):
    code = "not_found"
    status_code = 404


class StaleDataError(ViewEngineError):
    """Expected race: a result arrived after a newer mutation superseded it."""

    code = "stale_data"
    status_code = 409


class TransportError(ViewEngineError):
    code = "transport_error"
    status_code = 503


_BY_CODE = {
    cls.code: cls
    for cls in (
        ValidationError,
        FallbackViewRequired,
        PermissionDenied,
        NotFoundError,
        StaleDataError,
        TransportError,
    )
}

_BY_STATUS = {
    400: ValidationError,
    403: PermissionDenied,
    404: NotFoundError,
    409: FallbackViewRequired,
    422: ValidationError,
}


def error_from_payload(status_code: int, payload: Optional[Dict[str, Any]]) -> ViewEngineError:
    """Rebuild a ViewEngineError from an HTTP error response."""
    payload = payload if isinstance(payload, dict) else {}
    code = payload.get("code")
    detail = payload.get("detail")
    if not isinstance(detail, str):
        detail = f"Request failed with status {status_code}"

    cls = _BY_CODE.get(code) if isinstance(code, str) else None
    if cls is None:
        cls = _BY_STATUS.get(status_code)
    if cls is None:
        cls = TransportError if status_code >= 500 else ValidationError
    return cls(detail, status_code=status_code)
