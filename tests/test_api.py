"""
Todo Backend — API Integration Tests
======================================

What:  End-to-end tests through the FastAPI app: login, todos, errors, CORS,
       health and request IDs.
How:   HTTPX AsyncClient over ASGITransport against an in-memory SQLite
       database (see conftest.py). No network, no lifespan.
"""

import logging
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest

from todo_backend.models.session import AuthSession


async def _login(client, email="a@x.com", password="pw1"):
    response = await client.post("/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


def _auth(token):
    return {"Authorization": token}


class TestLogin:

    @pytest.mark.asyncio
    async def test_first_login_provisions_account(self, test_client):
        body = await _login(test_client)

        assert body["email"] == "a@x.com"
        assert isinstance(body["user_id"], int)
        assert len(body["session_id"]) >= 32

        response = await test_client.get("/todos", headers=_auth(body["session_id"]))
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_second_login_same_password(self, test_client):
        first = await _login(test_client)
        second = await _login(test_client)

        assert second["user_id"] == first["user_id"]
        assert second["session_id"] != first["session_id"]

    @pytest.mark.asyncio
    async def test_wrong_password_rejected(self, test_client):
        await _login(test_client, password="pw1")

        response = await test_client.post(
            "/login", json={"email": "a@x.com", "password": "pw2"}
        )

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "unauthorized"
        assert "session_id" not in body

    @pytest.mark.asyncio
    async def test_both_sessions_stay_valid(self, test_client):
        first = await _login(test_client)
        second = await _login(test_client)

        for token in (first["session_id"], second["session_id"]):
            response = await test_client.get("/todos", headers=_auth(token))
            assert response.status_code == 200

    @pytest.mark.parametrize(
        "payload",
        [
            {"email": "a@x.com"},
            {"password": "pw1"},
            {"email": "", "password": "pw1"},
            {"email": "a@x.com", "password": ""},
            {},
        ],
    )
    @pytest.mark.asyncio
    async def test_incomplete_body_is_bad_request(self, test_client, payload):
        response = await test_client.post("/login", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_unparseable_body_is_bad_request(self, test_client):
        response = await test_client.post(
            "/login",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_password_not_echoed_in_error(self, test_client):
        response = await test_client.post(
            "/login", json={"email": "", "password": "hunter2-secret"}
        )

        assert response.status_code == 400
        assert "hunter2-secret" not in response.text


class TestTodos:

    @pytest.mark.asyncio
    async def test_create_then_list(self, test_client):
        session = await _login(test_client)
        headers = _auth(session["session_id"])

        created = await test_client.post("/todos", json={"title": "buy milk"}, headers=headers)

        assert created.status_code == 200
        todo = created.json()
        assert todo["title"] == "buy milk"
        assert todo["completed"] is False
        assert todo["user_id"] == session["user_id"]
        assert "created_at" in todo

        listed = await test_client.get("/todos", headers=headers)
        assert listed.json() == [todo]

    @pytest.mark.asyncio
    async def test_list_is_newest_first(self, test_client):
        headers = _auth((await _login(test_client))["session_id"])
        for title in ("first", "second", "third"):
            await test_client.post("/todos", json={"title": title}, headers=headers)

        titles = [t["title"] for t in (await test_client.get("/todos", headers=headers)).json()]

        assert titles == ["third", "second", "first"]

    @pytest.mark.asyncio
    async def test_reads_are_idempotent(self, test_client):
        headers = _auth((await _login(test_client))["session_id"])
        await test_client.post("/todos", json={"title": "one"}, headers=headers)

        first = await test_client.get("/todos", headers=headers)
        second = await test_client.get("/todos", headers=headers)

        assert first.json() == second.json()

    @pytest.mark.asyncio
    async def test_users_never_see_each_other(self, test_client):
        alice = _auth((await _login(test_client, "alice@x.com", "pa"))["session_id"])
        bob = _auth((await _login(test_client, "bob@x.com", "pb"))["session_id"])

        await test_client.post("/todos", json={"title": "alice's"}, headers=alice)
        await test_client.post("/todos", json={"title": "bob's"}, headers=bob)

        alice_titles = [t["title"] for t in (await test_client.get("/todos", headers=alice)).json()]
        bob_titles = [t["title"] for t in (await test_client.get("/todos", headers=bob)).json()]
        assert alice_titles == ["alice's"]
        assert bob_titles == ["bob's"]

    @pytest.mark.asyncio
    async def test_owner_comes_from_session_not_body(self, test_client):
        alice = await _login(test_client, "alice@x.com", "pa")
        bob = await _login(test_client, "bob@x.com", "pb")

        response = await test_client.post(
            "/todos",
            json={"title": "sneaky", "user_id": bob["user_id"]},
            headers=_auth(alice["session_id"]),
        )

        assert response.json()["user_id"] == alice["user_id"]

    @pytest.mark.parametrize("title", ["", "   "])
    @pytest.mark.asyncio
    async def test_blank_title_is_bad_request(self, test_client, title):
        headers = _auth((await _login(test_client))["session_id"])

        response = await test_client.post("/todos", json={"title": title}, headers=headers)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert (await test_client.get("/todos", headers=headers)).json() == []

    @pytest.mark.asyncio
    async def test_missing_title_is_bad_request(self, test_client):
        headers = _auth((await _login(test_client))["session_id"])

        response = await test_client.post("/todos", json={}, headers=headers)

        assert response.status_code == 400
        assert response.json()["details"]["fields"][0]["loc"] == ["body", "title"]

    @pytest.mark.asyncio
    async def test_unparseable_body_with_session_is_bad_request(self, test_client):
        headers = _auth((await _login(test_client))["session_id"])
        headers["Content-Type"] = "application/json"

        response = await test_client.post("/todos", content=b"{not json", headers=headers)

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_bearer_prefix_accepted(self, test_client):
        token = (await _login(test_client))["session_id"]

        response = await test_client.get("/todos", headers=_auth(f"Bearer {token}"))

        assert response.status_code == 200


class TestSessionRejection:

    @pytest.mark.asyncio
    async def test_missing_header(self, test_client):
        response = await test_client.get("/todos")

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_unknown_token(self, test_client):
        response = await test_client.get("/todos", headers=_auth("0" * 64))

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_expired_token_looks_like_unknown(self, test_client, db_session):
        user_id = (await _login(test_client))["user_id"]
        db_session.add(AuthSession(
            id="e" * 64,
            user_id=user_id,
            expires_at=datetime.now(timezone.utc) - timedelta(seconds=1),
        ))
        await db_session.commit()

        expired = await test_client.get("/todos", headers=_auth("e" * 64))
        unknown = await test_client.get("/todos", headers=_auth("f" * 64))

        assert expired.status_code == unknown.status_code == 401
        assert expired.json()["message"] == unknown.json()["message"]

    @pytest.mark.asyncio
    async def test_create_requires_session(self, test_client):
        response = await test_client.post("/todos", json={"title": "x"})

        assert response.status_code == 401

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"content": b"{not json", "headers": {"Content-Type": "application/json"}},
            {"json": {}},
            {"json": {"title": "   "}},
        ],
    )
    @pytest.mark.asyncio
    async def test_session_checked_before_body(self, test_client, kwargs):
        response = await test_client.post("/todos", **kwargs)

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"


class TestTransport:

    @pytest.mark.asyncio
    async def test_unknown_route_is_404(self, test_client):
        response = await test_client.get("/nope")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_wrong_method_is_405(self, test_client):
        response = await test_client.delete("/todos")

        assert response.status_code == 405
        assert response.json()["error"] == "method_not_allowed"

    @pytest.mark.asyncio
    async def test_cors_preflight(self, test_client):
        response = await test_client.options(
            "/todos",
            headers={
                "Origin": "http://example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Authorization, Content-Type",
            },
        )

        assert response.status_code == 200
        assert "access-control-allow-origin" in response.headers
        assert response.content == b""

    @pytest.mark.parametrize("path", ["/login", "/todos"])
    @pytest.mark.asyncio
    async def test_bare_options_is_empty_200(self, test_client, path):
        response = await test_client.options(path)

        assert response.status_code == 200
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_login_preflight(self, test_client):
        response = await test_client.options(
            "/login",
            headers={
                "Origin": "http://example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )

        assert response.status_code == 200
        assert response.content == b""
        assert "POST" in response.headers["access-control-allow-methods"]

    @pytest.mark.asyncio
    async def test_cors_header_on_simple_request(self, test_client):
        response = await test_client.get("/health", headers={"Origin": "http://example.com"})

        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/health", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"

    @pytest.mark.asyncio
    async def test_request_id_generated(self, test_client):
        response = await test_client.get("/health")

        assert response.headers.get("X-Request-ID")

    @pytest.mark.parametrize("supplied", ["x" * 65, "has space", "semi;colon"])
    @pytest.mark.asyncio
    async def test_unacceptable_request_id_is_replaced(self, test_client, supplied):
        response = await test_client.get("/health", headers={"X-Request-ID": supplied})

        echoed = response.headers["X-Request-ID"]
        assert echoed != supplied
        assert len(echoed) == 12

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, test_client):
        response = await test_client.get("/todos", headers={"X-Request-ID": "rid-401"})

        assert response.json()["request_id"] == "rid-401"


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"

    @pytest.mark.asyncio
    async def test_unreachable_database(self, test_client, database):
        with patch.object(database, "ping", AsyncMock(side_effect=OSError("down"))):
            response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


class TestAccessLog:

    @pytest.mark.asyncio
    async def test_authenticated_request_logs_user(self, test_client, caplog):
        session = await _login(test_client)
        user_id, token = session["user_id"], session["session_id"]
        caplog.set_level(logging.INFO, logger="todo_backend.access")

        await test_client.get("/todos", headers={**_auth(token), "X-Request-ID": "rid-log"})

        lines = [r.getMessage() for r in caplog.records if r.name == "todo_backend.access"]
        assert len(lines) == 1
        assert lines[0].startswith("GET /todos 200")
        assert "[rid-log]" in lines[0]
        assert f"user={user_id}" in lines[0]
        assert token not in lines[0]

    @pytest.mark.asyncio
    async def test_rejected_request_logs_no_user(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="todo_backend.access")

        await test_client.get("/todos")

        (record,) = [r for r in caplog.records if r.name == "todo_backend.access"]
        assert record.levelno == logging.WARNING
        assert record.getMessage().endswith("user=-")

    @pytest.mark.asyncio
    async def test_login_does_not_log_password(self, test_client, caplog):
        caplog.set_level(logging.DEBUG)

        await _login(test_client, password="hunter2-secret")

        assert "hunter2-secret" not in caplog.text

    @pytest.mark.asyncio
    async def test_preflight_and_health_not_logged(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="todo_backend.access")

        await test_client.options("/todos")
        await test_client.get("/health")

        assert not [r for r in caplog.records if r.name == "todo_backend.access"]
