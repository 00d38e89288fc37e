"""Shared fixtures for the yatijapp client tests."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterator

import pytest

from yatijapp_tui.api.models import Action, Session, Target
from yatijapp_tui.auth import Token, TokenStore

_CREATED = datetime(2025, 6, 1, 9, 0, 0)
_UPDATED = datetime(2025, 6, 2, 9, 0, 0)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def token_store(tmp_path) -> TokenStore:
    store = TokenStore(str(tmp_path / "creds" / "token.json"))
    store.set(Token(access_token="A1", refresh_token="R1", session_uuid="S1"))
    return store


@pytest.fixture
def make_target() -> Callable[..., Target]:
    def _make(n: int = 0, **overrides: Any) -> Target:
        data: Dict[str, Any] = {
            "uuid": f"t{n}",
            "title": f"Target {n}",
            "created_at": _CREATED,
            "updated_at": _UPDATED,
        }
        data.update(overrides)
        return Target(**data)

    return _make


@pytest.fixture
def make_action() -> Callable[..., Action]:
    def _make(n: int = 0, **overrides: Any) -> Action:
        data: Dict[str, Any] = {
            "uuid": f"a{n}",
            "title": f"Action {n}",
            "created_at": _CREATED,
            "updated_at": _UPDATED,
            "target_uuid": "t1",
            "target_title": "Target 1",
        }
        data.update(overrides)
        return Action(**data)

    return _make


@pytest.fixture
def make_session() -> Callable[..., Session]:
    def _make(n: int = 0, **overrides: Any) -> Session:
        data: Dict[str, Any] = {
            "uuid": f"s{n}",
            "created_at": _CREATED,
            "updated_at": _UPDATED,
            "starts_at": datetime(2025, 6, 1, 10, 0, 0),
            "action_uuid": "a1",
            "action_title": "Action 1",
            "target_uuid": "t1",
            "target_title": "Target 1",
        }
        data.update(overrides)
        return Session(**data)

    return _make


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Undo ``setup_logging`` so later tests see the default logging tree."""
    yield
    for name in ("yatijapp_tui", "httpx", "textual"):
        log = logging.getLogger(name)
        for handler in list(log.handlers):
            log.removeHandler(handler)
            handler.close()
        log.propagate = True
        log.setLevel(logging.NOTSET)
    logging.getLogger().setLevel(logging.WARNING)
    for handler in list(logging.getLogger().handlers):
        if isinstance(handler, logging.FileHandler):
            logging.getLogger().removeHandler(handler)
            handler.close()
