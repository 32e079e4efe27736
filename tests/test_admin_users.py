"""Tests for the admin user-management endpoints."""

from __future__ import annotations

import pytest
from flask.testing import FlaskClient

from models import db
from models.user import User


def _create_user(email: str, password: str, role: str = "user", full_name: str = "Someone") -> User:
    user = User(email=email, role=role, full_name=full_name)
    user.set_password(password, rounds=4)
    db.session.add(user)
    db.session.commit()
    return user


def _login(client: FlaskClient, email: str, password: str) -> str:
    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.get_json()["token"]


@pytest.fixture()
def admin_headers(client: FlaskClient, db_session) -> dict:
    _create_user("admin@example.com", "AdminPass123", role="admin", full_name="Admin")
    return {"Authorization": _login(client, "admin@example.com", "AdminPass123")}


def test_list_users_omits_credentials(client: FlaskClient, db_session, admin_headers):
    _create_user("worker@example.com", "WorkerPass123", full_name="Worker Bee")

    response = client.get("/admin/users", headers=admin_headers)

    assert response.status_code == 200
    users = response.get_json()
    assert {u["email"] for u in users} == {"admin@example.com", "worker@example.com"}
    for user in users:
        assert "password" not in user
        assert "password_hash" not in user
        assert "passwordHash" not in user
        assert "reset_token" not in user


def test_update_user_name_and_role(client: FlaskClient, db_session, admin_headers):
    _create_user("worker@example.com", "WorkerPass123")

    response = client.put(
        "/admin/users/worker@example.com",
        json={"fullName": "Promoted Worker", "role": "admin"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.get_json()
    assert body["fullName"] == "Promoted Worker"
    assert body["role"] == "admin"


def test_update_rejects_unknown_role(client: FlaskClient, db_session, admin_headers):
    _create_user("worker@example.com", "WorkerPass123")

    response = client.put(
        "/admin/users/worker@example.com",
        json={"role": "overlord"},
        headers=admin_headers,
    )

    assert response.status_code == 400


def test_update_missing_user(client: FlaskClient, db_session, admin_headers):
    response = client.put(
        "/admin/users/ghost@example.com",
        json={"fullName": "Ghost"},
        headers=admin_headers,
    )
    assert response.status_code == 404


def test_delete_user(client: FlaskClient, db_session, admin_headers):
    _create_user("worker@example.com", "WorkerPass123")

    response = client.delete("/admin/users/worker@example.com", headers=admin_headers)

    assert response.status_code == 200
    assert response.get_json()["message"] == "User deleted successfully"
    assert User.query.filter_by(email="worker@example.com").first() is None

    again = client.delete("/admin/users/worker@example.com", headers=admin_headers)
    assert again.status_code == 404


@pytest.mark.parametrize(
    "method, path",
    [
        ("get", "/admin/users"),
        ("put", "/admin/users/worker@example.com"),
        ("delete", "/admin/users/worker@example.com"),
        ("get", "/admin/dashboard"),
    ],
)
def test_admin_endpoints_require_token(client: FlaskClient, db_session, method, path):
    _create_user("worker@example.com", "WorkerPass123")

    response = getattr(client, method)(path, json={"fullName": "x"})

    assert response.status_code == 401


def test_admin_endpoints_reject_regular_users(client: FlaskClient, db_session):
    _create_user("worker@example.com", "WorkerPass123")
    headers = {"Authorization": _login(client, "worker@example.com", "WorkerPass123")}

    assert client.get("/admin/users", headers=headers).status_code == 403
    assert client.get("/admin/dashboard", headers=headers).status_code == 403
    assert (
        client.delete("/admin/users/worker@example.com", headers=headers).status_code == 403
    )
    assert User.query.filter_by(email="worker@example.com").first() is not None


def test_admin_dashboard_welcomes_admin(client: FlaskClient, db_session, admin_headers):
    response = client.get("/admin/dashboard", headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()["message"] == "Welcome to the admin dashboard"


def test_open_admin_api_when_auth_disabled(app, client: FlaskClient, db_session):
    app.config["ADMIN_API_REQUIRE_AUTH"] = False
    _create_user("worker@example.com", "WorkerPass123")

    assert client.get("/admin/users").status_code == 200
    # The dashboard always requires an admin session.
    assert client.get("/admin/dashboard").status_code == 401
