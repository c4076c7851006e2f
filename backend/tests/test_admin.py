"""
Tests for admin endpoints.
"""

from fastapi.testclient import TestClient

from tests.factories import load_user, seed_user


def test_get_system_health_admin(client: TestClient, admin_headers):
    """Test getting system health (admin only)."""
    response = client.get(
        "/api/v1/admin/health",
        headers=admin_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["overall_status"] == "healthy"
    assert data["services"]["database"]["status"] == "healthy"
    assert "timestamp" in data


def test_get_system_health_non_admin(client: TestClient, auth_headers, manager_headers):
    """Test getting system health as non-admin (should fail)."""
    assert client.get("/api/v1/admin/health", headers=auth_headers).status_code == 403
    assert client.get("/api/v1/admin/health", headers=manager_headers).status_code == 403


def test_analytics(client: TestClient, test_user, manager_user, admin_headers, auth_headers):
    client.post(
        "/api/v1/support",
        json={"subject": "Help", "message": "Please", "type": "support"},
        headers=auth_headers,
    )

    response = client.get("/api/v1/admin/analytics", headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"users": 1, "managers": 1, "totalTickets": 1, "openTickets": 1}


def test_list_users_and_managers(client: TestClient, test_user, manager_user, admin_headers):
    users = client.get("/api/v1/admin/users", headers=admin_headers).json()
    managers = client.get("/api/v1/admin/managers", headers=admin_headers).json()

    assert {u["username"] for u in users} == {"alice", "manny", "root"}
    assert [m["username"] for m in managers] == ["manny"]
    assert all("hashed_password" not in u for u in users)


def test_update_user_role(client: TestClient, test_user, admin_user, admin_headers):
    response = client.put(f"/api/v1/admin/users/{test_user.id}/role", json={"role": "manager"}, headers=admin_headers)
    assert response.status_code == 200
    assert load_user(client, test_user.id).role == "manager"

    response = client.put(f"/api/v1/admin/users/{admin_user.id}/role", json={"role": "user"}, headers=admin_headers)
    assert response.status_code == 400

    response = client.put(f"/api/v1/admin/users/{test_user.id}/role", json={"role": "root"}, headers=admin_headers)
    assert response.status_code == 422


def test_update_user_permissions(client: TestClient, test_user, admin_headers):
    response = client.put(
        f"/api/v1/admin/users/{test_user.id}/permissions",
        json={"canScreenshot": True},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["data"] == {"canScreenshot": True}
    assert load_user(client, test_user.id).can_screenshot is True


def test_invite_manager_flow(client: TestClient, test_user, admin_headers):
    response = client.post("/api/v1/admin/invite-manager", json={"email": "alice@example.com"}, headers=admin_headers)
    assert response.status_code == 200

    code = load_user(client, test_user.id).otp
    assert len(code) == 8

    response = client.post("/api/v1/auth/setup-manager", json={"email": "alice@example.com", "otp": code})
    assert response.status_code == 200
    assert response.json()["user"]["role"] == "manager"

    response = client.post("/api/v1/admin/invite-manager", json={"email": "alice@example.com"}, headers=admin_headers)
    assert response.status_code == 400


def test_invite_manager_rejections(client: TestClient, admin_headers):
    seed_user(client, "pending", "pending@example.com", is_verified=False)

    missing = client.post("/api/v1/admin/invite-manager", json={"email": "nobody@example.com"}, headers=admin_headers)
    unverified = client.post("/api/v1/admin/invite-manager", json={"email": "pending@example.com"}, headers=admin_headers)

    assert missing.status_code == 404
    assert unverified.status_code == 400


def test_setup_manager_rejects_short_code(client: TestClient, test_user):
    response = client.post("/api/v1/auth/setup-manager", json={"email": "alice@example.com", "otp": "123456"})
    assert response.status_code == 422


def test_admin_ticket_overview_and_delete(client: TestClient, auth_headers, admin_headers):
    ticket = client.post(
        "/api/v1/support",
        json={"subject": "Help", "message": "Please", "type": "bug"},
        headers=auth_headers,
    ).json()

    tickets = client.get("/api/v1/admin/tickets", headers=admin_headers).json()
    assert [t["id"] for t in tickets] == [ticket["id"]]
    assert tickets[0]["user"]["username"] == "alice"

    assert client.delete(f"/api/v1/admin/tickets/{ticket['id']}", headers=admin_headers).status_code == 200
    assert client.get("/api/v1/admin/tickets", headers=admin_headers).json() == []
    assert client.delete(f"/api/v1/admin/tickets/{ticket['id']}", headers=admin_headers).status_code == 404
