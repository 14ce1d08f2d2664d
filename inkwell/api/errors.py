"""
Translation of component errors into HTTP responses.

Every JSON failure body has the shape {"success": false, "error": <message>}.
"""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

STATUS_BY_KIND = {
    "not_found": 404,
    "validation": 422,
    "persistence": 500,
}


class ApiError(Exception):
    """Raised by routes; rendered by the handler registered in main."""

    def __init__(self, status_code: int, message: str, code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.code = code


def raise_for_errors(errors: list[Any]) -> None:
    """Raise ApiError for the first component error, if any."""
    if not errors:
        return
    err = errors[0]
    # Validation failures report every message at once
    if err.kind == "validation":
        messages = list(dict.fromkeys(e.message for e in errors if e.kind == "validation"))
        raise ApiError(STATUS_BY_KIND["validation"], " ".join(messages), err.code)
    raise ApiError(STATUS_BY_KIND.get(err.kind, 500), err.message, err.code)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "error": exc.message}
    if exc.code:
        body["code"] = exc.code
    return JSONResponse(status_code=exc.status_code, content=body)
