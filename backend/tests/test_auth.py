"""
Tests for authentication endpoints.
"""

from fastapi.testclient import TestClient
from sqlalchemy import update

from app.models.user import User
from tests.factories import DEFAULT_PASSWORD, auth_headers_for, execute, find_user, load_user, seed_user


def _register(client: TestClient, username="newuser", email="newuser@example.com"):
    return client.post(
        "/api/v1/auth/register",
        json={"username": username, "email": email, "password": "newpassword123"},
    )


def test_register_user(client: TestClient):
    """Test user registration."""
    response = _register(client)

    assert response.status_code == 201
    assert response.json()["email"] == "newuser@example.com"

    user = find_user(client, "newuser@example.com")
    assert user.is_verified is False
    assert len(user.otp) == 6
    assert user.hashed_password != "newpassword123"


def test_register_duplicate_username(client: TestClient, test_user):
    """Test registration with duplicate username."""
    response = _register(client, username="alice", email="different@example.com")
    assert response.status_code == 400


def test_register_duplicate_email(client: TestClient, test_user):
    response = _register(client, username="someone", email="ALICE@example.com")
    assert response.status_code == 400


def test_verify_otp_logs_in(client: TestClient):
    _register(client)
    code = find_user(client, "newuser@example.com").otp

    wrong = client.post("/api/v1/auth/verify-otp", json={"email": "newuser@example.com", "otp": "000000"})
    assert wrong.status_code == 400

    response = client.post("/api/v1/auth/verify-otp", json={"email": "newuser@example.com", "otp": code})
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["user"]["is_verified"] is True

    # Codes are single use
    again = client.post("/api/v1/auth/verify-otp", json={"email": "newuser@example.com", "otp": code})
    assert again.status_code == 400


def test_unverified_user_cannot_login(client: TestClient):
    _register(client)

    response = client.post(
        "/api/v1/auth/login",
        json={"username": "newuser", "password": "newpassword123"},
    )
    assert response.status_code == 400


def test_login(client: TestClient, test_user):
    """Test user login by username and by email."""
    for identifier in ("alice", "alice@example.com"):
        response = client.post(
            "/api/v1/auth/login",
            json={"username": identifier, "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 200
        data = response.json()
        assert "access_token" in data
        assert data["user"]["username"] == "alice"

    assert load_user(client, test_user.id).login_count == 2


def test_login_invalid_credentials(client: TestClient, test_user):
    """Test login with invalid credentials."""
    response = client.post(
        "/api/v1/auth/login",
        json={"username": "alice", "password": "wrongpassword"},
    )
    assert response.status_code == 401


def test_get_current_user(client: TestClient, auth_headers):
    """Test getting current user info."""
    response = client.get("/api/v1/auth/me", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["username"] == "alice"
    assert data["has_pin"] is False
    assert "hashed_password" not in data


def test_get_current_user_unauthorized(client: TestClient):
    response = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_inactive_user_rejected(client: TestClient):
    user = seed_user(client, "ghost", "ghost@example.com")
    execute(client, update(User).where(User.id == user.id).values(is_active=False))

    response = client.get("/api/v1/auth/me", headers=auth_headers_for(user))
    assert response.status_code == 403


def test_pin_lifecycle(client: TestClient, auth_headers):
    assert client.post("/api/v1/auth/set-pin", json={"pin": "12a4"}, headers=auth_headers).status_code == 422
    assert client.post("/api/v1/auth/set-pin", json={"pin": "1234"}, headers=auth_headers).status_code == 200
    assert client.post("/api/v1/auth/set-pin", json={"pin": "5678"}, headers=auth_headers).status_code == 400

    assert client.post("/api/v1/auth/verify-pin", json={"pin": "1234"}, headers=auth_headers).status_code == 200
    assert client.post("/api/v1/auth/verify-pin", json={"pin": "4321"}, headers=auth_headers).status_code == 400

    response = client.post(
        "/api/v1/auth/reset-pin-with-password",
        json={"password": DEFAULT_PASSWORD, "new_pin": "9999"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    assert client.post("/api/v1/auth/verify-pin", json={"pin": "9999"}, headers=auth_headers).status_code == 200


def test_verify_password(client: TestClient, auth_headers):
    ok = client.post("/api/v1/auth/verify-password", json={"password": DEFAULT_PASSWORD}, headers=auth_headers)
    bad = client.post("/api/v1/auth/verify-password", json={"password": "nope"}, headers=auth_headers)

    assert ok.status_code == 200
    assert bad.status_code == 400


def test_password_reset_flow(client: TestClient, test_user):
    response = client.post("/api/v1/auth/forgot-password", json={"email": "nobody@example.com"})
    assert response.status_code == 200

    response = client.post("/api/v1/auth/forgot-password", json={"email": "alice@example.com"})
    assert response.status_code == 200
    code = load_user(client, test_user.id).otp

    response = client.post(
        "/api/v1/auth/reset-password",
        json={"email": "alice@example.com", "otp": code, "new_password": "brandnew123"},
    )
    assert response.status_code == 200

    login = client.post("/api/v1/auth/login", json={"username": "alice", "password": "brandnew123"})
    assert login.status_code == 200


def test_backup_roundtrip(client: TestClient, auth_headers):
    assert client.get("/api/v1/auth/backup", headers=auth_headers).json() == {"data": None}

    client.post("/api/v1/auth/backup", json={"data": "opaque-blob"}, headers=auth_headers)

    assert client.get("/api/v1/auth/backup", headers=auth_headers).json() == {"data": "opaque-blob"}
