"""
HTTP-level checks for the routers through FastAPI's TestClient.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Make the boxoffice package importable when running the tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from boxoffice.app import create_app  # noqa: E402
from boxoffice.core import config as core_config  # noqa: E402
from boxoffice.core.rate_limiter import reset_limits  # noqa: E402
import boxoffice.services.reset_delivery as reset_delivery  # noqa: E402


@pytest.fixture()
def sent_emails(monkeypatch):
    sent = []

    def fake_send(subject, to_email, html_body, text_body=None):
        sent.append({"subject": subject, "to": to_email, "text": text_body})
        return True

    monkeypatch.setattr(reset_delivery, "send_email", fake_send)
    return sent


@pytest.fixture()
def make_client(tmp_path, monkeypatch, sent_emails):
    """Build an app over a temporary data dir; settings cache is reset around each test."""

    def _make(app_env: str = "dev") -> TestClient:
        monkeypatch.setenv("DATA_DIR", str(tmp_path))
        monkeypatch.setenv("APP_ENV", app_env)
        monkeypatch.delenv("USERS_FILE", raising=False)
        monkeypatch.delenv("EVENTS_FILE", raising=False)
        core_config.get_settings.cache_clear()
        return TestClient(create_app())

    reset_limits()
    yield _make
    reset_limits()
    core_config.get_settings.cache_clear()


@pytest.fixture()
def client(make_client):
    return make_client()


def _register(client, username="alice", email="alice@example.com", password="s3cret", **extra):
    payload = {"fullname": username.title(), "username": username, "email": email, "password": password}
    payload.update(extra)
    return client.post("/register", json=payload)


def test_register_and_login(client, tmp_path):
    resp = _register(client)
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "user": {"id": 1, "fullname": "Alice", "username": "alice", "email": "alice@example.com", "role": "user"},
    }
    assert (tmp_path / "users.json").exists()

    resp = client.post("/login", json={"username": "ALICE", "password": "s3cret"})
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "alice@example.com"


def test_error_outcomes_map_to_status_codes(client):
    _register(client)

    resp = client.post("/register", json={"username": "bob"})
    assert (resp.status_code, resp.json()["error"]) == (400, "missing_field")
    resp = _register(client, username="Alice", email="other@example.com")
    assert (resp.status_code, resp.json()["error"]) == (409, "duplicate_username")
    resp = _register(client, username="other", email="ALICE@example.com")
    assert (resp.status_code, resp.json()["error"]) == (409, "duplicate_email")

    wrong = client.post("/login", json={"username": "alice", "password": "bad"})
    unknown = client.post("/login", json={"username": "ghost", "password": "bad"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json()


def test_user_admin_routes(client):
    _register(client)
    _register(client, username="bob", email="bob@example.com")

    listed = client.get("/users").json()
    assert [u["username"] for u in listed] == ["alice", "bob"]
    assert all("passwordHash" not in u for u in listed)

    assert client.post("/users/alice/promote").json() == {"success": True}
    assert client.post("/users/alice/promote").status_code == 200
    assert client.get("/users/alice").json()["role"] == "admin"

    resp = client.delete("/users/alice")
    assert (resp.status_code, resp.json()["error"]) == (403, "forbidden")
    assert client.delete("/users/bob").json() == {"success": True}
    resp = client.delete("/users/bob")
    assert (resp.status_code, resp.json()["error"]) == (404, "not_found")
    assert client.get("/users/bob").status_code == 404


def test_password_reset_round_trip_in_dev(client, sent_emails):
    _register(client)

    resp = client.post("/auth/forgot", json={"identifier": "alice"})
    assert resp.status_code == 200
    token = resp.json()["token"]
    assert sent_emails[0]["to"] == "alice@example.com"
    assert token in sent_emails[0]["text"]

    reset = {"email": "alice@example.com", "token": token, "password": "n3w-pass"}
    assert client.post("/auth/reset", json=reset).json() == {"success": True}
    resp = client.post("/auth/reset", json=reset)
    assert (resp.status_code, resp.json()["error"]) == (400, "invalid_or_expired_token")
    assert client.post("/login", json={"username": "alice", "password": "n3w-pass"}).status_code == 200


def test_forgot_hides_token_outside_dev(make_client):
    client = make_client("prod")
    _register(client)

    resp = client.post("/auth/forgot", json={"identifier": "alice@example.com"})
    assert resp.json() == {"success": True}
    resp = client.post("/auth/forgot", json={"identifier": "nobody"})
    assert (resp.status_code, resp.json()["error"]) == (404, "not_found")
    assert client.get("/healthz").headers["strict-transport-security"].startswith("max-age=")


def test_events_routes(client):
    assert client.get("/events").json() == []

    first = client.post("/events/tiers", json={"eventName": "Concert", "price": 50, "amount": 10, "ownerUserId": 1})
    assert first.json()["createdEvent"] is True
    second = client.post("/events/tiers", json={"eventName": "concert", "price": 50, "amount": 5, "ownerUserId": 2})
    assert second.json()["stock"] == 15
    client.post("/events/tiers", json={"eventName": "Concert", "price": 20.0, "amount": 1, "ownerUserId": 2})

    assert client.get("/events").json() == [
        {
            "id": 1,
            "name": "Concert",
            "priceTiers": [
                {"price": 20, "stock": 1, "ownerUserId": 2},
                {"price": 50, "stock": 15, "ownerUserId": 1},
            ],
        }
    ]

    resp = client.post("/events/tiers", json={"eventName": "Concert", "price": 50, "amount": 0, "ownerUserId": 1})
    assert (resp.status_code, resp.json()["error"]) == (400, "missing_field")


def test_corrupt_events_file_is_a_server_error(client, tmp_path):
    (tmp_path / "events.json").write_text("{]", encoding="utf-8")

    resp = client.get("/events")
    assert (resp.status_code, resp.json()["error"]) == (500, "corrupt_document")


def test_login_is_rate_limited(client):
    for _ in range(10):
        assert client.post("/login", json={"username": "ghost", "password": "x"}).status_code == 401
    assert client.post("/login", json={"username": "ghost", "password": "x"}).status_code == 429


def test_security_headers(client):
    resp = client.get("/healthz")
    assert resp.json() == {"status": "ok"}
    assert resp.headers["x-frame-options"] == "DENY"
    assert resp.headers["x-content-type-options"] == "nosniff"
    assert "strict-transport-security" not in resp.headers


@pytest.mark.parametrize(
    "payload",
    [
        {"eventName": "Concert", "price": "abc", "amount": 1, "ownerUserId": 1},
        {"eventName": "Concert", "price": 10, "amount": "lots", "ownerUserId": 1},
        {"eventName": "Concert", "price": 10, "amount": 1, "ownerUserId": "me"},
        {"eventName": ["Concert"], "price": 10, "amount": 1, "ownerUserId": 1},
        {"price": 10, "amount": 1, "ownerUserId": 1},
    ],
)
def test_non_numeric_tier_fields_are_missing_field_errors(client, payload):
    resp = client.post("/events/tiers", json=payload)

    assert (resp.status_code, resp.json()["error"]) == (400, "missing_field")
    assert client.get("/events").json() == []


def test_malformed_user_record_is_a_corrupt_document_response(client, tmp_path):
    (tmp_path / "users.json").write_text('[{"id": 1, "username": 5}]', encoding="utf-8")

    resp = client.post("/login", json={"username": "alice", "password": "pw"})
    assert (resp.status_code, resp.json()["error"]) == (500, "corrupt_document")
