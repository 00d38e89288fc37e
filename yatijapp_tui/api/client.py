"""Typed client for the yatijapp REST API.

Every method builds an ``httpx.Request``, sends it through the shared
:class:`~yatijapp_tui.auth.AuthClient` and maps failures onto the
:mod:`yatijapp_tui.api.errors` taxonomy, so screens only ever see
:class:`~yatijapp_tui.api.errors.ApiError` subclasses.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

import httpx
import pydantic

from yatijapp_tui.api.errors import (
    ApiError,
    NotFoundError,
    UnauthorizedError,
    UnexpectedApiError,
    error_from_response,
    error_message,
)
from yatijapp_tui.api.models import (
    ListResult,
    Metadata,
    MessageResponse,
    Record,
    RecordRequest,
    RecordType,
    Session,
    User,
    decode_record,
)
from yatijapp_tui.api.preferences import Filter, Preferences
from yatijapp_tui.auth import AuthClient, Token
from yatijapp_tui.constants import API_PREFIX, LIST_PAGE_SIZE
from yatijapp_tui.errors import AuthClientError, InvalidTokenError

logger = logging.getLogger(__name__)


class YatijappApi:
    """Async access to targets, actions, sessions, users and tokens.

    Parameters
    ----------
    auth:
        Client that owns the HTTP connection and the bearer token.
    """

    def __init__(self, auth: AuthClient) -> None:
        self.auth = auth

    @property
    def endpoint(self) -> str:
        return self.auth.endpoint

    # ── Private helpers ──────────────────────────────────────────

    async def _send(
        self,
        method: str,
        path: str,
        what: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        """Send one request and return the (already read) response.

        Transport failures become ``UnexpectedApiError(0, ...)``, a token
        that cannot be used or refreshed becomes ``UnauthorizedError``.
        """
        request = self.auth.build_request(method, f"{API_PREFIX}{path}", json=json, params=params)
        try:
            if authenticated:
                resp = await self.auth.send(request)
            else:
                resp = await self.auth.send_unauthenticated(request)
            await resp.aread()
        except InvalidTokenError as exc:
            logger.info("Token unusable for %s: %s", what, exc.msg, extra={"action": what})
            raise UnauthorizedError(httpx.codes.UNAUTHORIZED, exc.msg) from exc
        except AuthClientError as exc:
            raise UnexpectedApiError(0, f"API request error: {what}") from exc
        except httpx.HTTPError as exc:
            logger.error(
                "Request failed: %s: %s",
                what,
                exc,
                extra={"action": what, "type": type(exc).__name__, "occurrence": "api request"},
            )
            raise UnexpectedApiError(0, f"API request error: {what}") from exc
        return resp

    def _check(self, resp: httpx.Response, expected: int, what: str) -> None:
        if resp.status_code == expected:
            return
        err = error_from_response(resp)
        logger.warning(
            "%s returned %d: %s",
            what,
            resp.status_code,
            err.msg,
            extra={"action": what, "status": resp.status_code, "occurrence": "api response"},
        )
        raise err

    @staticmethod
    def _json(resp: httpx.Response) -> Dict[str, Any]:
        try:
            payload = resp.json()
        except ValueError as exc:
            raise UnexpectedApiError(resp.status_code, "API response decode error") from exc
        if not isinstance(payload, dict):
            raise UnexpectedApiError(resp.status_code, "API response decode error")
        return payload

    @staticmethod
    def _decode_error(resp: httpx.Response, exc: Exception) -> UnexpectedApiError:
        logger.error(
            "Failed to decode response from %s: %s",
            resp.request.url.path,
            exc,
            extra={"status": resp.status_code, "occurrence": "api decode", "type": type(exc).__name__},
        )
        return UnexpectedApiError(resp.status_code, "API response decode error")

    # ── Records ──────────────────────────────────────────────────

    async def list_records(
        self,
        record_type: RecordType,
        *,
        src_uuid: str = "",
        filter: Optional[Filter] = None,
        search: str = "",
        page: int = 1,
        page_size: int = LIST_PAGE_SIZE,
    ) -> ListResult:
        """``GET /targets``, ``/actions``, ``/sessions`` or ``/records``.

        Parameters
        ----------
        src_uuid:
            Parent uuid; narrows actions to a target
            (``/targets/{uuid}/actions``) or sessions to an action.
        filter:
            Sort column, order and statuses to request.
        search:
            Free-text query; required for ``RecordType.ALL``.
        """
        path = f"/{record_type.path}"
        if src_uuid and record_type.parent is not None:
            path = f"/{record_type.parent.path}/{src_uuid}/{record_type.path}"

        params: Dict[str, Any] = {"page": page, "page_size": page_size}
        if filter is not None:
            params.update(filter.query())
        if search:
            params["search"] = search

        what = f"GET {record_type.value}s" if record_type is not RecordType.ALL else "GET Records"
        resp = await self._send("GET", path, what, params=params)
        self._check(resp, httpx.codes.OK, what)

        payload = self._json(resp)
        try:
            metadata = Metadata.model_validate(payload.get("metadata") or {})
            records = [decode_record(record_type, item) for item in payload.get(record_type.path) or []]
        except (pydantic.ValidationError, ValueError) as exc:
            raise self._decode_error(resp, exc) from exc
        return ListResult(metadata=metadata, records=records)

    async def get_record(self, record_type: RecordType, uuid: str) -> Record:
        """``GET /<kind>s/{uuid}``"""
        what = f"GET {record_type.value}"
        resp = await self._send("GET", f"/{record_type.path}/{uuid}", what)
        self._check(resp, httpx.codes.OK, what)
        payload = self._json(resp)
        try:
            return decode_record(record_type, payload.get(record_type.label) or {})
        except (pydantic.ValidationError, ValueError) as exc:
            raise self._decode_error(resp, exc) from exc

    async def create_record(self, record_type: RecordType, data: RecordRequest) -> None:
        """``POST /<kind>s``"""
        what = f"POST {record_type.value}"
        resp = await self._send("POST", f"/{record_type.path}", what, json=data.to_body(record_type))
        self._check(resp, httpx.codes.CREATED, what)

    async def update_record(self, record_type: RecordType, uuid: str, data: RecordRequest) -> None:
        """``PATCH /<kind>s/{uuid}``"""
        what = f"PATCH {record_type.value}"
        resp = await self._send(
            "PATCH", f"/{record_type.path}/{uuid}", what, json=data.to_body(record_type)
        )
        self._check(resp, httpx.codes.OK, what)

    async def end_session(self, session: Session, ends_at: Optional[datetime] = None) -> None:
        """Close an in-progress session at *ends_at* (now by default)."""
        data = RecordRequest(
            uuid=session.uuid,
            action_uuid=session.action_uuid,
            notes=session.notes,
            starts_at=session.starts_at,
            ends_at=ends_at or datetime.now().astimezone(),
        )
        await self.update_record(RecordType.SESSION, session.uuid, data)

    async def delete_record(self, record_type: RecordType, uuid: str) -> None:
        """``DELETE /<kind>s/{uuid}``"""
        what = f"DELETE {record_type.value}"
        resp = await self._send("DELETE", f"/{record_type.path}/{uuid}", what)
        self._check(resp, httpx.codes.OK, what)

    # ── Users ────────────────────────────────────────────────────

    async def current_user(self) -> User:
        """``GET /users/me``"""
        what = "GET User"
        resp = await self._send("GET", "/users/me", what)
        self._check(resp, httpx.codes.OK, what)
        payload = self._json(resp)
        try:
            return User.model_validate(payload.get("user") or {})
        except pydantic.ValidationError as exc:
            raise self._decode_error(resp, exc) from exc

    async def register(self, name: str, email: str, password: str) -> User:
        """``POST /users``; the server mails an activation token."""
        what = "POST User"
        resp = await self._send(
            "POST",
            "/users",
            what,
            json={"name": name, "email": email, "password": password},
            authenticated=False,
        )
        self._check(resp, httpx.codes.ACCEPTED, what)
        payload = self._json(resp)
        try:
            return User.model_validate(payload.get("user") or {})
        except pydantic.ValidationError as exc:
            raise self._decode_error(resp, exc) from exc

    async def activate(self, token: str) -> None:
        """``PUT /users/activated``"""
        what = "PUT User activation"
        resp = await self._send(
            "PUT", "/users/activated", what, json={"token": token}, authenticated=False
        )
        self._check(resp, httpx.codes.OK, what)

    async def request_password_reset(self, email: str) -> str:
        """``POST /tokens/password-reset``; returns the server's message."""
        what = "POST Password reset token"
        resp = await self._send(
            "POST", "/tokens/password-reset", what, json={"email": email}, authenticated=False
        )
        self._check(resp, httpx.codes.ACCEPTED, what)
        return self._message(resp)

    async def reset_password(self, token: str, password: str) -> str:
        """``PUT /users/password``; returns the server's message."""
        what = "PUT User password"
        resp = await self._send(
            "PUT",
            "/users/password",
            what,
            json={"token": token, "password": password},
            authenticated=False,
        )
        self._check(resp, httpx.codes.OK, what)
        return self._message(resp)

    def _message(self, resp: httpx.Response) -> str:
        try:
            return MessageResponse.model_validate(self._json(resp)).message
        except pydantic.ValidationError as exc:
            raise self._decode_error(resp, exc) from exc

    # ── Tokens ───────────────────────────────────────────────────

    async def signin(self, email: str, password: str) -> Token:
        """``POST /tokens/authentication`` and persist the issued token."""
        what = "POST Authentication token"
        resp = await self._send(
            "POST",
            "/tokens/authentication",
            what,
            json={"email": email, "password": password},
            authenticated=False,
        )
        self._check(resp, httpx.codes.CREATED, what)
        payload = self._json(resp)
        try:
            token = Token.model_validate(payload.get("authentication_token") or {})
        except pydantic.ValidationError as exc:
            raise self._decode_error(resp, exc) from exc
        if not token.is_valid:
            raise UnexpectedApiError(resp.status_code, "API response decode error")
        self.auth.set_token(token)
        logger.info("Signed in", extra={"action": what})
        return token

    async def signout(self) -> None:
        """``DELETE /tokens/authentication``; the local token is always cleared."""
        what = "DELETE Authentication token"
        try:
            resp = await self._send("DELETE", "/tokens/authentication", what)
            self._check(resp, httpx.codes.OK, what)
        finally:
            self.auth.clear_token()
        logger.info("Signed out", extra={"action": what})

    # ── Preferences ──────────────────────────────────────────────

    async def get_preferences(self) -> Preferences:
        """``GET /users/preferences``; ``NotFoundError`` when none are stored."""
        what = "GET Preferences"
        resp = await self._send("GET", "/users/preferences", what)
        if resp.status_code == httpx.codes.NOT_FOUND:
            raise NotFoundError(error_message(resp))
        self._check(resp, httpx.codes.OK, what)
        payload = self._json(resp)
        try:
            return Preferences.from_wire(payload.get("preferences") or {})
        except (pydantic.ValidationError, ValueError) as exc:
            raise self._decode_error(resp, exc) from exc

    async def update_preferences(self, preferences: Preferences) -> None:
        """``PUT /users/preferences``"""
        what = "PUT Preferences"
        resp = await self._send(
            "PUT", "/users/preferences", what, json={"preferences": preferences.to_wire()}
        )
        self._check(resp, httpx.codes.OK, what)


__all__ = ["ApiError", "YatijappApi"]
