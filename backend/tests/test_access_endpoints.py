"""
Tests for delegated access grants and the access gate.
"""

from fastapi.testclient import TestClient
from sqlalchemy import select

from app.models.user import User
from app.models.wallet import Card
from tests.factories import (
    ADDRESS_PAYLOAD,
    CARD_PAYLOAD,
    execute,
    expire_grant,
    issue_grant,
    load_user,
)


def _grant(client: TestClient, headers, user_id, **permissions):
    body = {"userId": str(user_id)}
    if permissions:
        body["permissions"] = permissions
    response = client.post("/api/v1/access/grant", json=body, headers=headers)
    assert response.status_code == 200
    return response.json()


def test_manager_issues_grant(client: TestClient, test_user, manager_headers):
    data = _grant(client, manager_headers, test_user.id)

    assert data["success"] is True
    assert len(data["token"]) == 64
    assert data["link"].endswith(f"/secure-edit?token={data['token']}")
    assert "expiresAt" in data


def test_regular_user_cannot_grant(client: TestClient, test_user, other_headers):
    response = client.post("/api/v1/access/grant", json={"userId": str(test_user.id)}, headers=other_headers)
    assert response.status_code == 403


def test_grant_for_unknown_user(client: TestClient, admin_headers):
    response = client.post(
        "/api/v1/access/grant",
        json={"userId": "00000000-0000-0000-0000-000000000001"},
        headers=admin_headers,
    )
    assert response.status_code == 404


def test_verify_does_not_consume(client: TestClient, test_user, admin_headers):
    token = _grant(client, admin_headers, test_user.id)["token"]

    for _ in range(2):
        response = client.post("/api/v1/access/verify", json={"token": token})
        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is True
        assert data["userId"] == str(test_user.id)
        assert data["permissions"] == {"canAdd": False, "canEdit": True, "canDelete": True}


def test_verify_invalid_and_expired(client: TestClient, test_user):
    response = client.post("/api/v1/access/verify", json={"token": "f" * 64})
    assert response.status_code == 400
    assert response.json() == {"valid": False, "message": "Invalid link"}

    grant, _ = issue_grant(client, test_user)
    expire_grant(client, grant.token)

    response = client.post("/api/v1/access/verify", json={"token": grant.token})
    assert response.status_code == 400
    assert response.json()["message"] == "Link has expired"


def test_consume_ends_session(client: TestClient, test_user):
    grant, _ = issue_grant(client, test_user)

    response = client.post("/api/v1/access/consume", json={"token": grant.token})
    assert response.json() == {"success": True}

    assert client.post("/api/v1/access/verify", json={"token": grant.token}).status_code == 400
    response = client.get(f"/api/v1/users/{test_user.id}/cards", headers={"X-Access-Token": grant.token})
    assert response.status_code == 403


def test_consume_unknown_token(client: TestClient):
    response = client.post("/api/v1/access/consume", json={"token": "f" * 64})
    assert response.json() == {"success": False}


def test_token_grants_view_edit_delete(client: TestClient, test_user, auth_headers):
    card = client.post("/api/v1/cards", json=CARD_PAYLOAD, headers=auth_headers).json()
    grant, _ = issue_grant(client, test_user)
    headers = {"X-Access-Token": grant.token}
    base = f"/api/v1/users/{test_user.id}/cards"

    listed = client.get(base, headers=headers)
    assert listed.status_code == 200
    assert listed.json()[0]["number"] == "**** **** **** 1111"

    edited = client.put(f"{base}/{card['id']}", json={"number": "5500 0000 0000 0004"}, headers=headers)
    assert edited.status_code == 200
    assert edited.json()["last4"] == "0004"

    # The grant stays live for further actions in its window
    assert client.delete(f"{base}/{card['id']}", headers=headers).status_code == 200
    assert client.get(base, headers=headers).json() == []


def test_token_without_add_permission(client: TestClient, test_user):
    grant, _ = issue_grant(client, test_user)

    response = client.post(
        f"/api/v1/users/{test_user.id}/addresses",
        json=ADDRESS_PAYLOAD,
        headers={"X-Access-Token": grant.token},
    )
    assert response.status_code == 403


def test_token_with_add_permission(client: TestClient, test_user):
    grant, _ = issue_grant(client, test_user, permissions={"canAdd": True, "canDelete": False})
    headers = {"X-Access-Token": grant.token}

    created = client.post(f"/api/v1/users/{test_user.id}/addresses", json=ADDRESS_PAYLOAD, headers=headers)
    assert created.status_code == 201

    response = client.delete(f"/api/v1/users/{test_user.id}/addresses/{created.json()['id']}", headers=headers)
    assert response.status_code == 403


def test_token_is_bound_to_its_user(client: TestClient, test_user, other_user):
    grant, _ = issue_grant(client, test_user)

    response = client.get(f"/api/v1/users/{other_user.id}/cards", headers={"X-Access-Token": grant.token})
    assert response.status_code == 403


def test_missing_or_expired_token(client: TestClient, test_user):
    assert client.get(f"/api/v1/users/{test_user.id}/cards").status_code == 403

    grant, _ = issue_grant(client, test_user)
    expire_grant(client, grant.token)
    response = client.get(f"/api/v1/users/{test_user.id}/cards", headers={"X-Access-Token": grant.token})
    assert response.status_code == 403


def test_update_data_profile(client: TestClient, test_user, other_user):
    grant, _ = issue_grant(client, test_user)

    response = client.post(
        "/api/v1/access/update-data",
        json={"token": grant.token, "type": "profile", "data": {"username": "alice2"}},
    )
    assert response.status_code == 200
    assert load_user(client, test_user.id).username == "alice2"

    response = client.post(
        "/api/v1/access/update-data",
        json={"token": grant.token, "type": "profile", "data": {"email": other_user.email}},
    )
    assert response.status_code == 400


def test_update_data_adds_card(client: TestClient, test_user):
    grant, _ = issue_grant(client, test_user, permissions={"canAdd": True})

    response = client.post(
        "/api/v1/access/update-data",
        json={"token": grant.token, "type": "card", "data": CARD_PAYLOAD},
    )
    assert response.status_code == 200

    owners = execute(client, select(Card.user_id)).scalars().all()
    assert owners == [test_user.id]


def test_update_data_requires_add_permission(client: TestClient, test_user):
    grant, _ = issue_grant(client, test_user)

    response = client.post(
        "/api/v1/access/update-data",
        json={"token": grant.token, "type": "card", "data": CARD_PAYLOAD},
    )
    assert response.status_code == 403


def test_update_data_validates_payload(client: TestClient, test_user):
    grant, _ = issue_grant(client, test_user, permissions={"canAdd": True})

    response = client.post(
        "/api/v1/access/update-data",
        json={"token": grant.token, "type": "bank", "data": {"bank_name": "X"}},
    )
    assert response.status_code == 422


def test_update_data_rejects_bad_token(client: TestClient):
    response = client.post(
        "/api/v1/access/update-data",
        json={"token": "f" * 64, "type": "profile", "data": {"username": "mallory"}},
    )
    assert response.status_code == 403
    assert execute(client, select(User).where(User.username == "mallory")).first() is None
