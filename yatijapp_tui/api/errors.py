"""Error taxonomy for calls against the yatijapp REST API."""

from __future__ import annotations

from typing import Any, Mapping

import httpx

from yatijapp_tui.errors import YatijappError


class ApiError(YatijappError):
    """Raised when the API answers with a non-success status.

    ``status`` is ``0`` when the request never produced a response.
    """

    def __init__(self, status: int, msg: str) -> None:
        self.status = status
        self.msg = msg
        super().__init__(f"HTTP {status}: {msg}" if status else msg)


class UnauthorizedError(ApiError):
    """401/403, or a token that could not be used or refreshed."""


class NotFoundError(ApiError):
    def __init__(self, msg: str) -> None:
        super().__init__(httpx.codes.NOT_FOUND, msg)


class UnexpectedApiError(ApiError):
    """Anything the client has no specific recovery for."""


def format_error_body(error: Any) -> str:
    """Render the ``error`` member of an error response as one line.

    A string is returned unchanged.  A mapping with a single entry
    renders as ``"field - message"``; several entries render as
    ``"field: message, field: message"`` ordered by field name.
    """
    if isinstance(error, str):
        return error
    if isinstance(error, Mapping):
        if len(error) == 1:
            key, value = next(iter(error.items()))
            return f"{key} - {value}"
        return ", ".join(f"{key}: {error[key]}" for key in sorted(error))
    return str(error)


def error_message(resp: httpx.Response) -> str:
    """Extract a readable message from an error response body.

    Bodies that are not the expected ``{"error": ...}`` document are
    reported as a decode failure rather than raised.
    """
    try:
        payload = resp.json()
    except ValueError:
        return "API error response decode failure"
    if not isinstance(payload, Mapping) or "error" not in payload:
        return "API error response decode failure"
    return format_error_body(payload["error"])


def error_from_response(resp: httpx.Response) -> ApiError:
    """Map a non-success response to the matching :class:`ApiError`."""
    msg = error_message(resp)
    if resp.status_code in (httpx.codes.UNAUTHORIZED, httpx.codes.FORBIDDEN):
        return UnauthorizedError(resp.status_code, msg)
    return UnexpectedApiError(resp.status_code, msg)
