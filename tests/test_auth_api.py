import uuid

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.db.session import engine
from app.infrastructure.persistence.sqlalchemy.repositories.user_repository_sql import SqlUserRepository


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def new_email():
    return f"user-{uuid.uuid4().hex[:10]}@example.com"


def signup(client, email, password="password1", name="Tester"):
    return client.post("/auth/signup", json={"email": email, "password": password, "name": name, "age": 28})


def test_signup_returns_pending_user_and_token(client):
    email = new_email()
    resp = signup(client, email)

    assert resp.status_code == 201
    body = resp.json()
    assert body["user"]["email"] == email
    assert body["user"]["status"] == "pending"
    assert "passwordHash" not in body["user"] and "password_hash" not in body["user"]
    assert body["accessToken"]


def test_signup_duplicate_email_conflicts(client):
    email = new_email()
    signup(client, email)

    resp = signup(client, email.upper())

    assert resp.status_code == 409
    assert resp.json()["success"] is False


def test_signup_validates_payload(client):
    assert client.post("/auth/signup", json={"email": "not-an-email", "password": "password1", "name": "X"}).status_code == 422
    assert client.post("/auth/signup", json={"email": new_email(), "password": "123", "name": "X"}).status_code == 422


def test_login_requires_approval(client):
    email = new_email()
    user_id = signup(client, email).json()["user"]["id"]

    pending = client.post("/auth/login", json={"email": email, "password": "password1"})
    assert pending.status_code == 401

    SqlUserRepository(engine).set_status(user_id, "approved")
    resp = client.post("/auth/login", json={"email": email, "password": "password1"})

    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == user_id
    assert resp.json()["user"]["status"] == "approved"


def test_login_wrong_password(client):
    email = new_email()
    user_id = signup(client, email).json()["user"]["id"]
    SqlUserRepository(engine).set_status(user_id, "approved")

    resp = client.post("/auth/login", json={"email": email, "password": "nope-nope"})

    assert resp.status_code == 401
    assert resp.json()["error"] == "Invalid email or password"


def test_check_email(client):
    email = new_email()
    assert client.get(f"/auth/check-email/{email}").json() == {"available": True}
    signup(client, email)
    assert client.get(f"/auth/check-email/{email}").json() == {"available": False}


def test_logout_and_delete_account(client):
    email = new_email()
    token = signup(client, email).json()["accessToken"]
    headers = {"Authorization": f"Bearer {token}"}

    assert client.post("/auth/logout").status_code == 401
    assert client.post("/auth/logout", headers=headers).json() == {"message": "Logged out"}

    resp = client.delete("/auth/account", headers=headers)
    assert resp.status_code == 200
    assert client.get(f"/auth/check-email/{email}").json() == {"available": True}
    assert client.delete("/auth/account", headers=headers).status_code == 404


def test_invalid_token_is_rejected(client):
    resp = client.get("/analysis", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "healthy"
    assert body["ai"]["api_key_configured"] is True
    assert body["auth"]["secret_key_configured"] is True


@pytest.mark.parametrize("email", ["a..b@example.com", "user@-bad-.com", "x@y..com", "no-at-sign.example.com"])
def test_signup_rejects_malformed_email(client, email):
    resp = client.post("/auth/signup", json={"email": email, "password": "password1", "name": "X"})

    assert resp.status_code == 422


def test_signup_normalizes_email_and_reports_utc_timestamp(client):
    local = f"Mixed.Case-{uuid.uuid4().hex[:8]}"
    resp = signup(client, f"{local}@Example.COM")

    assert resp.status_code == 201
    user = resp.json()["user"]
    assert user["email"] == f"{local.lower()}@example.com"
    assert user["createdAt"].endswith("Z")
