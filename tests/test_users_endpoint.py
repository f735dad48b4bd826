from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.user_store import InMemoryUserStore, User


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())


def test_root_says_hello(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.text == "Hello World"


def test_create_get_delete_roundtrip(client):
    r = client.post("/users", json={"name": "Alice"})
    assert r.status_code == 204, r.text
    assert r.content == b""
    assert r.headers["location"] == "/users/1"

    r = client.get("/users/1")
    assert r.status_code == 200
    assert r.json() == {"name": "Alice"}

    r = client.delete("/users/1")
    assert r.status_code == 204
    assert r.content == b""

    r = client.get("/users/1")
    assert r.status_code == 404
    assert r.json()["detail"] == "user not found"


def test_id_is_not_reused_after_delete(client):
    assert client.post("/users", json={"name": "A"}).headers["location"] == "/users/1"
    assert client.post("/users", json={"name": "B"}).headers["location"] == "/users/2"
    assert client.delete("/users/1").status_code == 204

    r = client.post("/users", json={"name": "C"})
    assert r.headers["location"] == "/users/3"
    assert client.get("/users/2").json() == {"name": "B"}
    assert client.get("/users/3").json() == {"name": "C"}


@pytest.mark.parametrize(
    "body",
    [
        {"name": ""},
        {},
        {"username": "Alice"},
        {"name": None},
        ["Alice"],
    ],
)
def test_create_rejects_bad_body_with_400(client, body):
    r = client.post("/users", json=body)
    assert r.status_code == 400, r.text
    assert "detail" in r.json()

    # Nothing was stored.
    assert client.get("/users/1").status_code == 404
    assert client.get("/healthz").json()["users"] == 0


def test_whitespace_name_is_accepted_and_read_back(client):
    r = client.post("/users", json={"name": "   "})
    assert r.status_code == 204, r.text

    r = client.get(r.headers["location"])
    assert r.status_code == 200
    assert r.json() == {"name": "   "}


@pytest.mark.parametrize(
    "content_type",
    ["application/x-www-form-urlencoded", "text/plain", None],
)
def test_create_decodes_json_body_whatever_the_content_type(client, content_type):
    headers = {"Content-Type": content_type} if content_type else {}
    r = client.post("/users", content=b'{"name":"Alice"}', headers=headers)
    assert r.status_code == 204, r.text
    assert r.headers["location"] == "/users/1"
    assert client.get("/users/1").json() == {"name": "Alice"}


@pytest.mark.parametrize("content_type", ["text/plain", "application/x-www-form-urlencoded"])
def test_create_rejects_empty_name_whatever_the_content_type(client, content_type):
    r = client.post("/users", content=b'{"name":""}', headers={"Content-Type": content_type})
    assert r.status_code == 400
    assert client.get("/healthz").json()["users"] == 0


def test_create_rejects_empty_body_with_400(client):
    r = client.post("/users")
    assert r.status_code == 400


def test_unexpected_error_is_logged_and_returns_500(caplog):
    class _BrokenStore(InMemoryUserStore):
        def get(self, user_id: int) -> User:
            raise RuntimeError("disk on fire")

    app = create_app()
    app.state.user_store = _BrokenStore()
    client = TestClient(app, raise_server_exceptions=False)

    with caplog.at_level(logging.ERROR, logger="user_cache_api"):
        r = client.get("/users/1")

    assert r.status_code == 500
    assert r.json() == {"detail": "internal error"}
    records = [rec for rec in caplog.records if rec.name == "user_cache_api" and rec.levelno == logging.ERROR]
    assert records
    assert records[0].exc_info is not None
    assert isinstance(records[0].exc_info[1], RuntimeError)


def test_create_rejects_malformed_json_with_400(client):
    r = client.post("/users", content=b"{not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400


@pytest.mark.parametrize("method", ["get", "delete"])
def test_non_integer_id_is_400(client, method):
    r = getattr(client, method)("/users/abc")
    assert r.status_code == 400
    assert "user_id" in r.json()["detail"]


@pytest.mark.parametrize("method", ["get", "delete"])
def test_unknown_id_is_404(client, method):
    r = getattr(client, method)("/users/99")
    assert r.status_code == 404


def test_delete_twice_is_404(client):
    client.post("/users", json={"name": "A"})
    assert client.delete("/users/1").status_code == 204
    assert client.delete("/users/1").status_code == 404


def test_apps_do_not_share_a_store():
    a = TestClient(create_app())
    b = TestClient(create_app())

    a.post("/users", json={"name": "only-in-a"})

    assert a.get("/users/1").status_code == 200
    assert b.get("/users/1").status_code == 404


def test_healthz_reports_user_count(client):
    client.post("/users", json={"name": "A"})
    client.post("/users", json={"name": "B"})
    client.delete("/users/1")

    r = client.get("/healthz")
    assert r.status_code == 200
    data = r.json()
    assert data["ok"] is True
    assert data["service"] == "user-cache-api"
    assert data["users"] == 1
