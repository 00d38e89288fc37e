"""Authenticated HTTP client with refresh-and-retry.

:class:`AuthClient` wraps an ``httpx.AsyncClient``.  Every request is
sent with the stored bearer token; a ``401`` response triggers exactly
one token refresh followed by exactly one resend of the original
request.  A second ``401`` is handed back to the caller unchanged.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from yatijapp_tui.auth.token import Token, TokenStore
from yatijapp_tui.constants import API_PREFIX
from yatijapp_tui.display.logging_config import secret_redaction_filter
from yatijapp_tui.errors import AuthClientError, InvalidTokenError

logger = logging.getLogger(__name__)

# Default timeout for API calls (seconds).
_DEFAULT_TIMEOUT = 10.0

_REFRESH_PATH = f"{API_PREFIX}/tokens/refresh"

Refresher = Callable[[httpx.AsyncClient, str], Awaitable[Token]]


def refresh_token(endpoint: str) -> Refresher:
    """Build the refresher that exchanges a refresh token at *endpoint*.

    The server answers ``201`` with
    ``{"authentication_token": {access_token, refresh_token, session_uuid}}``;
    any other status is reported as :class:`InvalidTokenError`.
    """
    url = f"{endpoint.rstrip('/')}{_REFRESH_PATH}"

    async def _refresh(client: httpx.AsyncClient, refresh: str) -> Token:
        resp = await client.post(url, json={"refresh_token": refresh})
        if resp.status_code != httpx.codes.CREATED:
            raise InvalidTokenError(f"failed to refresh token: {resp.status_code}")
        try:
            payload: Dict[str, Any] = resp.json()
            return Token.model_validate(payload.get("authentication_token") or {})
        except ValueError as exc:
            raise InvalidTokenError("failed to decode refreshed token") from exc

    return _refresh


def _register_secrets(token: Token) -> None:
    secret_redaction_filter.register(token.access_token)
    secret_redaction_filter.register(token.refresh_token)


def _clone_request(request: httpx.Request) -> httpx.Request:
    """Copy *request* so it can be sent a second time.

    The body must already be buffered; a streaming body has no way to be
    replayed and is rejected here, before anything goes on the wire.
    """
    try:
        body = request.content
    except httpx.RequestNotRead as exc:
        raise AuthClientError("request body cannot be replayed") from exc
    return httpx.Request(
        request.method,
        request.url,
        headers=request.headers.copy(),
        content=body,
        extensions=dict(request.extensions),
    )


class AuthClient:
    """Async HTTP client that injects and refreshes bearer tokens.

    Parameters
    ----------
    endpoint:
        Root URL of the yatijapp API, e.g. ``https://api.yatij.app``.
    store:
        Where the token document is persisted.
    refresher:
        Coroutine factory used on ``401``; defaults to
        :func:`refresh_token` for *endpoint*.
    transport:
        Optional ``httpx`` transport, used by tests to stub the server.
    """

    def __init__(
        self,
        endpoint: str,
        store: TokenStore,
        *,
        refresher: Optional[Refresher] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.store = store
        self._refresher = refresher or refresh_token(self.endpoint)
        self._transport = transport
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None
        self._refresh_lock = asyncio.Lock()

    # ── Lifecycle ────────────────────────────────────────────────

    async def connect(self) -> None:
        """Create the underlying ``httpx.AsyncClient``."""
        if self.is_connected:
            return
        self._client = httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=self._timeout,
            transport=self._transport,
        )
        logger.info("AuthClient connected to %s", self.endpoint)

    async def close(self) -> None:
        """Shut down the HTTP client gracefully."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("AuthClient closed")

    @property
    def is_connected(self) -> bool:
        return self._client is not None and not self._client.is_closed

    async def ensure_client(self) -> httpx.AsyncClient:
        """Return the open client, connecting lazily on first use."""
        if not self.is_connected:
            await self.connect()
        assert self._client is not None
        return self._client

    # ── Token access ─────────────────────────────────────────────

    def get_token(self) -> Token:
        token = self.store.get()
        _register_secrets(token)
        return token

    def set_token(self, token: Token) -> None:
        _register_secrets(token)
        self.store.set(token)

    def clear_token(self) -> None:
        self.store.clear()

    # ── Requests ─────────────────────────────────────────────────

    def build_request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Request:
        """Build a request for ``{endpoint}{path}`` with a JSON body."""
        return httpx.Request(
            method,
            f"{self.endpoint}{path}",
            json=json,
            params=params,
            headers={"Accept": "application/json"},
        )

    async def send_unauthenticated(self, request: httpx.Request) -> httpx.Response:
        """Send *request* as-is (signin, signup, password reset)."""
        client = await self.ensure_client()
        return await client.send(request)

    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send *request* with bearer auth, refreshing once on ``401``.

        Raises :class:`InvalidTokenError` when no usable token is stored
        or the refresh is refused, :class:`AuthClientError` when the body
        cannot be replayed, and ``httpx.HTTPError`` on transport failures.
        """
        retry = _clone_request(request)
        client = await self.ensure_client()

        token = self.get_token()
        request.headers["Authorization"] = f"Bearer {token.access_token}"
        resp = await client.send(request)
        if resp.status_code != httpx.codes.UNAUTHORIZED:
            return resp

        await resp.aclose()
        logger.info("Access token rejected for %s %s, refreshing", request.method, request.url.path)
        fresh = await self._refresh(token)

        retry.headers["Authorization"] = f"Bearer {fresh.access_token}"
        return await client.send(retry)

    async def _refresh(self, stale: Token) -> Token:
        """Exchange the refresh token, single-flighting concurrent callers."""
        async with self._refresh_lock:
            current = self.get_token()
            # Another caller refreshed while we waited for the lock.
            if current.access_token and current.access_token != stale.access_token:
                return current
            if not current.refresh_token:
                raise InvalidTokenError("no refresh token available")

            client = await self.ensure_client()
            fresh = await self._refresher(client, current.refresh_token)
            if not fresh.is_valid:
                raise InvalidTokenError("invalid token received from refresher")
            self.set_token(fresh)
            logger.info("Access token refreshed")
            return fresh
