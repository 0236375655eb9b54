from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse


class ApiError(Exception):
    def __init__(self, status_code: int, code: str, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message


_UPSTREAM_PASSTHROUGH_CODES = {
    401: "INVALID_TOKEN",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
}
_UPSTREAM_REJECTED_STATUSES = frozenset({400, 409, 422})


class BackendError(ApiError):
    """Failure talking to the remote restaurant API."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        *,
        upstream_status: int | None = None,
    ):
        super().__init__(status_code, code, message)
        self.upstream_status = upstream_status

    @classmethod
    def from_upstream_status(cls, upstream_status: int, message: str) -> "BackendError":
        """Map a non-2xx backend response onto the dashboard's own status.

        Auth and missing-resource answers keep their status so the frontend
        can react to them; rejected edits surface as 422; anything else is
        a bad gateway.
        """
        if upstream_status in _UPSTREAM_PASSTHROUGH_CODES:
            return cls(
                upstream_status,
                _UPSTREAM_PASSTHROUGH_CODES[upstream_status],
                message,
                upstream_status=upstream_status,
            )
        if upstream_status in _UPSTREAM_REJECTED_STATUSES:
            return cls(422, "BACKEND_REJECTED", message, upstream_status=upstream_status)
        return cls(502, "BACKEND_ERROR", message, upstream_status=upstream_status)

    @classmethod
    def unavailable(cls, message: str) -> "BackendError":
        return cls(502, "BACKEND_UNAVAILABLE", message)

    @classmethod
    def bad_payload(cls, message: str) -> "BackendError":
        return cls(502, "BACKEND_BAD_PAYLOAD", message)


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        return str(request_id)
    return "unknown"


def error_response(request: Request, *, status_code: int, code: str, message: str) -> JSONResponse:
    payload = {
        "error": {
            "code": code,
            "message": message,
            "request_id": get_request_id(request),
        }
    }
    return JSONResponse(status_code=status_code, content=payload)
