# deskcrm/result.py
"""
Result type shared by the host handlers and the data-access client.

Every store operation produces either ``Ok(data)`` or ``Err(reason, code)``.
At the boundary the result travels as an envelope:

    {"success": true,  "data": ...}
    {"success": false, "error": "...", "code": "..."}
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

# Error codes
NOT_FOUND = "not_found"
FORBIDDEN = "forbidden"
UNAUTHORIZED = "unauthorized"
IO_ERROR = "io_error"
INVALID = "invalid"
ERROR = "error"

HTTP_STATUS = {
    NOT_FOUND: 404,
    FORBIDDEN: 403,
    UNAUTHORIZED: 401,
    INVALID: 422,
    IO_ERROR: 500,
    ERROR: 500,
}


@dataclass(frozen=True)
class Ok:
    data: Any = None

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    reason: str
    code: str = ERROR

    @property
    def success(self) -> bool:
        return False


Result = Union[Ok, Err]


def to_envelope(result: Result) -> dict:
    if isinstance(result, Ok):
        return {"success": True, "data": result.data}
    return {"success": False, "error": result.reason, "code": result.code}


def from_envelope(payload: Any) -> Result:
    """Parse an envelope coming back over the boundary. Anything malformed is an Err."""
    if not isinstance(payload, dict) or "success" not in payload:
        return Err("Malformed response from host", ERROR)
    if payload.get("success") is True:
        return Ok(payload.get("data"))
    return Err(str(payload.get("error") or "Operation failed"), str(payload.get("code") or ERROR))


def status_code_for(result: Result) -> int:
    if isinstance(result, Ok):
        return 200
    return HTTP_STATUS.get(result.code, 500)
