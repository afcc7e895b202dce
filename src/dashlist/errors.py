"""
Error kinds shared by the procedure layer, the HTTP surface and the client.

Each kind carries the name it is reported under on the wire and the HTTP
status the app answers with, so the client can map a response back to the
same exception class.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Type


class ProcedureError(Exception):
    """Base class for failures returned by a todo procedure."""

    kind: str = "ProcedureError"
    status_code: int = 500

    def __init__(self, message: str, detail: Optional[List[Dict[str, Any]]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail or []

    # PUBLIC_INTERFACE
    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON error body used by the HTTP surface."""
        return {"error": self.kind, "message": self.message, "detail": self.detail}


class ValidationError(ProcedureError):
    """Malformed or missing procedure input."""

    kind = "ValidationError"
    status_code = 422


class NotFoundError(ProcedureError):
    """The target todo does not exist."""

    kind = "NotFoundError"
    status_code = 404


class StorageError(ProcedureError):
    """The backing store could not be reached or failed the operation."""

    kind = "StorageError"
    status_code = 503


_KINDS: Dict[str, Type[ProcedureError]] = {
    cls.kind: cls for cls in (ValidationError, NotFoundError, StorageError)
}


# PUBLIC_INTERFACE
def error_from_body(body: Dict[str, Any], status_code: int) -> ProcedureError:
    """
    Rebuild a ProcedureError from an error response body.

    Unknown kinds fall back to the status code: 404 is NotFoundError,
    422 is ValidationError, anything else is StorageError.
    """
    kind = body.get("error")
    cls = _KINDS.get(kind) if isinstance(kind, str) else None
    if cls is None:
        if status_code == 404:
            cls = NotFoundError
        elif status_code == 422:
            cls = ValidationError
        else:
            cls = StorageError
    message = body.get("message") or body.get("detail") or f"Request failed with status {status_code}"
    detail = body.get("detail") if isinstance(body.get("detail"), list) else None
    return cls(str(message), detail=detail)
