"""Tests for the typed API client and its error mapping."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

import httpx
import pytest

from yatijapp_tui.api import (
    Action,
    NotFoundError,
    RecordType,
    Session,
    Target,
    UnauthorizedError,
    UnexpectedApiError,
    YatijappApi,
    default_preferences,
)
from yatijapp_tui.api.errors import error_from_response, error_message, format_error_body
from yatijapp_tui.api.models import RecordRequest, decode_record
from yatijapp_tui.api.preferences import Filter
from yatijapp_tui.auth import AuthClient, Token, TokenStore

ENDPOINT = "http://api.test"

Handler = Callable[[httpx.Request], httpx.Response]


def _target_payload(n: int, **extra: Any) -> Dict[str, Any]:
    payload = {
        "uuid": f"t{n}",
        "title": f"Target {n}",
        "description": "",
        "status": "queued",
        "due_date": "",
        "notes": "",
        "created_at": "2025-06-01T09:00:00Z",
        "updated_at": "2025-06-02T09:00:00Z",
        "last_active": "",
        "version": 1,
    }
    payload.update(extra)
    return payload


class Server:
    """Collects requests and answers them through *respond*."""

    def __init__(self, respond: Handler) -> None:
        self.respond = respond
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def _api(store: TokenStore, server: Server) -> YatijappApi:
    return YatijappApi(AuthClient(ENDPOINT, store, transport=httpx.MockTransport(server)))


@pytest.fixture
def signed_in(tmp_path) -> TokenStore:
    store = TokenStore(str(tmp_path / "token.json"))
    store.set(Token(access_token="GOOD", refresh_token="R1"))
    return store


# ── Error bodies ────────────────────────────────────────────────────────


class TestErrorMapping:
    def test_string_error(self) -> None:
        assert format_error_body("record not found") == "record not found"

    def test_single_field_error(self) -> None:
        assert format_error_body({"title": "must be provided"}) == "title - must be provided"

    def test_multiple_field_errors_sorted(self) -> None:
        body = {"status": "invalid", "due_date": "must be in the future"}
        assert format_error_body(body) == "due_date: must be in the future, status: invalid"

    def test_undecodable_body(self) -> None:
        resp = httpx.Response(500, content=b"<html>oops</html>")
        assert error_message(resp) == "API error response decode failure"

    def test_body_without_error_key(self) -> None:
        resp = httpx.Response(500, json={"message": "nope"})
        assert error_message(resp) == "API error response decode failure"

    @pytest.mark.parametrize("status", [401, 403])
    def test_unauthorized_statuses(self, status: int) -> None:
        err = error_from_response(httpx.Response(status, json={"error": "denied"}))
        assert isinstance(err, UnauthorizedError)
        assert err.status == status
        assert err.msg == "denied"

    def test_other_statuses_are_unexpected(self) -> None:
        err = error_from_response(httpx.Response(422, json={"error": {"title": "must be provided"}}))
        assert isinstance(err, UnexpectedApiError)
        assert str(err) == "HTTP 422: title - must be provided"


# ── Records ─────────────────────────────────────────────────────────────


class TestRecords:
    @pytest.mark.anyio
    async def test_list_targets(self, signed_in) -> None:
        server = Server(
            lambda r: httpx.Response(
                200,
                json={
                    "metadata": {"current_page": 1, "page_size": 50, "first_page": 1, "last_page": 2, "total_records": 60},
                    "targets": [_target_payload(1), _target_payload(2, status="in progress")],
                },
            )
        )
        api = _api(signed_in, server)
        result = await api.list_records(
            RecordType.TARGET,
            filter=default_preferences().target,
            page=1,
            page_size=50,
        )

        assert server.last.url.path == "/v1/targets"
        params = server.last.url.params
        assert params["sort_by"] == "-last_active"
        assert params["status"] == "queued,in progress"
        assert params["page"] == "1"
        assert params["page_size"] == "50"
        assert [r.uuid for r in result.records] == ["t1", "t2"]
        assert all(isinstance(r, Target) for r in result.records)
        assert result.metadata.last_page == 2
        assert result.records[0].due_date is None

    @pytest.mark.anyio
    async def test_actions_under_target(self, signed_in) -> None:
        server = Server(lambda r: httpx.Response(200, json={"metadata": {}, "actions": []}))
        api = _api(signed_in, server)
        await api.list_records(RecordType.ACTION, src_uuid="t1")
        assert server.last.url.path == "/v1/targets/t1/actions"

    @pytest.mark.anyio
    async def test_search_all_decodes_each_kind(self, signed_in) -> None:
        records = [
            dict(_target_payload(1), record_type="target"),
            dict(_target_payload(2), uuid="a2", record_type="activity", target_uuid="t1", target_title="Target 1"),
        ]
        server = Server(lambda r: httpx.Response(200, json={"metadata": {}, "records": records}))
        api = _api(signed_in, server)
        result = await api.list_records(RecordType.ALL, search="report")

        assert server.last.url.path == "/v1/records"
        assert server.last.url.params["search"] == "report"
        assert isinstance(result.records[0], Target)
        assert isinstance(result.records[1], Action)
        assert result.records[1].parents.uuid(RecordType.TARGET) == "t1"

    @pytest.mark.anyio
    async def test_undecodable_list_is_unexpected(self, signed_in) -> None:
        server = Server(lambda r: httpx.Response(200, json={"targets": [{"uuid": "x"}]}))
        api = _api(signed_in, server)
        with pytest.raises(UnexpectedApiError, match="decode"):
            await api.list_records(RecordType.TARGET)

    @pytest.mark.anyio
    async def test_get_record(self, signed_in) -> None:
        server = Server(lambda r: httpx.Response(200, json={"target": _target_payload(7)}))
        api = _api(signed_in, server)
        record = await api.get_record(RecordType.TARGET, "t7")
        assert server.last.url.path == "/v1/targets/t7"
        assert record.title == "Target 7"
        assert record.actual_type is RecordType.TARGET

    @pytest.mark.anyio
    async def test_create_action_carries_parent(self, signed_in) -> None:
        server = Server(lambda r: httpx.Response(201, json={"action": {}}))
        api = _api(signed_in, server)
        request = RecordRequest(title="Draft", status="queued", target_uuid="t1", target_title="Target 1")
        await api.create_record(RecordType.ACTION, request)

        assert server.last.method == "POST"
        assert server.last.url.path == "/v1/actions"
        body = json.loads(server.last.content)
        assert body["target_uuid"] == "t1"
        assert body["title"] == "Draft"
        assert "due_date" not in body

    @pytest.mark.anyio
    async def test_update_conflict_raises(self, signed_in) -> None:
        server = Server(lambda r: httpx.Response(409, json={"error": "edit conflict"}))
        api = _api(signed_in, server)
        with pytest.raises(UnexpectedApiError) as exc_info:
            await api.update_record(RecordType.TARGET, "t1", RecordRequest(title="x"))
        assert exc_info.value.status == 409
        assert exc_info.value.msg == "edit conflict"

    @pytest.mark.anyio
    async def test_end_session(self, signed_in, make_session) -> None:
        server = Server(lambda r: httpx.Response(200, json={"session": {}}))
        api = _api(signed_in, server)
        ends = datetime(2025, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
        await api.end_session(make_session(1), ends)

        assert server.last.method == "PATCH"
        assert server.last.url.path == "/v1/sessions/s1"
        body = json.loads(server.last.content)
        assert body["action_uuid"] == "a1"
        assert datetime.fromisoformat(body["ends_at"]) == ends

    @pytest.mark.anyio
    async def test_delete(self, signed_in) -> None:
        server = Server(lambda r: httpx.Response(200, json={"message": "deleted"}))
        api = _api(signed_in, server)
        await api.delete_record(RecordType.SESSION, "s1")
        assert (server.last.method, server.last.url.path) == ("DELETE", "/v1/sessions/s1")

    @pytest.mark.anyio
    async def test_transport_failure(self, signed_in) -> None:
        def boom(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        api = _api(signed_in, Server(boom))
        with pytest.raises(UnexpectedApiError) as exc_info:
            await api.list_records(RecordType.TARGET)
        assert exc_info.value.status == 0
        assert exc_info.value.msg == "API request error: GET Targets"

    @pytest.mark.anyio
    async def test_missing_token_is_unauthorized(self, tmp_path) -> None:
        server = Server(lambda r: httpx.Response(200))
        api = _api(TokenStore(str(tmp_path / "absent.json")), server)
        with pytest.raises(UnauthorizedError):
            await api.current_user()
        assert server.requests == []


# ── Users and tokens ────────────────────────────────────────────────────


class TestUsers:
    @pytest.mark.anyio
    async def test_signin_persists_token(self, tmp_path) -> None:
        store = TokenStore(str(tmp_path / "token.json"))
        server = Server(
            lambda r: httpx.Response(
                201,
                json={"authentication_token": {"access_token": "A", "refresh_token": "R", "session_uuid": "S"}},
            )
        )
        api = _api(store, server)
        await api.signin("ann@example.com", "secret-pass")

        assert "Authorization" not in server.last.headers
        assert json.loads(server.last.content) == {"email": "ann@example.com", "password": "secret-pass"}
        assert store.get() == Token(access_token="A", refresh_token="R", session_uuid="S")

    @pytest.mark.anyio
    async def test_signin_rejected(self, tmp_path) -> None:
        server = Server(lambda r: httpx.Response(401, json={"error": "invalid authentication credentials"}))
        api = _api(TokenStore(str(tmp_path / "token.json")), server)
        with pytest.raises(UnauthorizedError, match="invalid authentication credentials"):
            await api.signin("ann@example.com", "wrong-pass")

    @pytest.mark.anyio
    async def test_signout_clears_token_even_on_failure(self, signed_in) -> None:
        server = Server(lambda r: httpx.Response(500, json={"error": "server error"}))
        api = _api(signed_in, server)
        with pytest.raises(UnexpectedApiError):
            await api.signout()
        assert not signed_in.exists()

    @pytest.mark.anyio
    async def test_current_user(self, signed_in) -> None:
        server = Server(lambda r: httpx.Response(200, json={"user": {"uuid": "u1", "name": "ann", "email": "a@b.c"}}))
        user = await _api(signed_in, server).current_user()
        assert user.name == "ann"
        assert server.last.headers["Authorization"] == "Bearer GOOD"

    @pytest.mark.anyio
    async def test_register_and_activate(self, tmp_path) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/v1/users":
                return httpx.Response(202, json={"user": {"name": "ann", "email": "a@b.c"}})
            return httpx.Response(200, json={"user": {}})

        server = Server(respond)
        api = _api(TokenStore(str(tmp_path / "token.json")), server)
        user = await api.register("ann", "a@b.c", "secret-pass")
        await api.activate("TOKEN123")
        assert user.name == "ann"
        assert json.loads(server.last.content) == {"token": "TOKEN123"}
        assert server.last.url.path == "/v1/users/activated"

    @pytest.mark.anyio
    async def test_password_reset_messages(self, tmp_path) -> None:
        def respond(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/v1/tokens/password-reset":
                return httpx.Response(202, json={"message": "an email will be sent to you"})
            return httpx.Response(200, json={"message": "your password was successfully reset"})

        api = _api(TokenStore(str(tmp_path / "token.json")), Server(respond))
        assert await api.request_password_reset("a@b.c") == "an email will be sent to you"
        assert await api.reset_password("TOK", "new-secret") == "your password was successfully reset"


# ── Preferences ─────────────────────────────────────────────────────────


class TestPreferencesApi:
    @pytest.mark.anyio
    async def test_missing_preferences_is_not_found(self, signed_in) -> None:
        server = Server(lambda r: httpx.Response(404, json={"error": "the requested resource could not be found"}))
        api = _api(signed_in, server)
        with pytest.raises(NotFoundError) as exc_info:
            await api.get_preferences()
        assert exc_info.value.status == 404

        # The menu falls back to the built-in set.
        prefs = default_preferences()
        assert prefs.target == Filter(sort_by="last active", sort_order="descending", status=["queued", "in progress"])
        assert prefs.action == prefs.target
        assert prefs.session == Filter(
            sort_by="starts at", sort_order="descending", status=["in progress", "completed"]
        )

    @pytest.mark.anyio
    async def test_get_preferences(self, signed_in) -> None:
        wire = {
            "filters": {
                "target": {"sortBy": "due_date", "status": ["queued"]},
                "action": {"sortBy": "-created_at", "status": []},
                "session": {"sortBy": "-starts_at", "status": ["completed"]},
            },
            "version": "2025-12-09",
        }
        server = Server(lambda r: httpx.Response(200, json={"preferences": wire}))
        prefs = await _api(signed_in, server).get_preferences()
        assert prefs.target == Filter(sort_by="due date", sort_order="ascending", status=["queued"])
        assert prefs.action.sort_by == "created at"
        assert prefs.to_wire() == wire

    @pytest.mark.anyio
    async def test_update_preferences_body(self, signed_in) -> None:
        server = Server(lambda r: httpx.Response(200, json={"preferences": {}}))
        prefs = default_preferences()
        await _api(signed_in, server).update_preferences(prefs)
        assert server.last.method == "PUT"
        assert server.last.url.path == "/v1/users/preferences"
        assert json.loads(server.last.content) == {"preferences": prefs.to_wire()}


# ── Model decoding ──────────────────────────────────────────────────────


class TestDecoding:
    def test_activity_is_action(self) -> None:
        assert RecordType.from_wire("activity") is RecordType.ACTION
        assert RecordType.from_wire("Session") is RecordType.SESSION
        with pytest.raises(ValueError):
            RecordType.from_wire("project")

    def test_record_kind_is_stable(self) -> None:
        record = decode_record(RecordType.ALL, dict(_target_payload(1), record_type="target"))
        assert record.actual_type is RecordType.TARGET
        assert record.model_copy().actual_type is RecordType.TARGET

    def test_timestamps_are_localized(self) -> None:
        record = decode_record(RecordType.TARGET, _target_payload(1))
        assert record.created_at.tzinfo is not None
        assert record.created_at == datetime(2025, 6, 1, 9, 0, 0, tzinfo=timezone.utc)
        assert record.updated_at >= record.created_at

    def test_session_status_follows_end(self, make_session) -> None:
        open_session = make_session(1)
        closed = make_session(2, ends_at=datetime(2025, 6, 1, 11, 0, 0))
        assert isinstance(open_session, Session)
        assert open_session.status == "in progress"
        assert closed.status == "completed"
        assert open_session.parents.uuid(RecordType.ACTION) == "a1"
        assert list(open_session.parents) == [RecordType.TARGET, RecordType.ACTION]

    def test_session_body(self) -> None:
        starts = datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc)
        body = RecordRequest(action_uuid="a1", notes="n", starts_at=starts).to_body(RecordType.SESSION)
        assert body["action_uuid"] == "a1"
        assert "ends_at" not in body
        assert "title" not in body

    def test_paths(self) -> None:
        assert RecordType.TARGET.path == "targets"
        assert RecordType.ALL.path == "records"
        assert RecordType.SESSION.parent is RecordType.ACTION
        assert RecordType.TARGET.child is RecordType.ACTION
        assert RecordType.TARGET.parent is None
