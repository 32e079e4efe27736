"""Tests for the admin seeding script."""

from scripts import seed_admin
from models.user import User


def test_seed_admin_creates_then_updates(app, db_session, monkeypatch, capsys):
    monkeypatch.setattr(seed_admin, "create_app", lambda: app)

    seed_admin.main()
    admin = User.query.filter_by(email=seed_admin.ADMIN_EMAIL).one()
    assert admin.role == "admin"
    assert admin.check_password(seed_admin.ADMIN_PASSWORD)

    admin.role = "user"
    db_session.commit()
    seed_admin.main()

    assert User.query.filter_by(email=seed_admin.ADMIN_EMAIL).one().role == "admin"
    assert "Admin user updated" in capsys.readouterr().out


def test_seeded_admin_with_mixed_case_email_can_log_in(app, client, db_session, monkeypatch):
    monkeypatch.setattr(seed_admin, "create_app", lambda: app)
    monkeypatch.setattr(seed_admin, "ADMIN_EMAIL", " Boss@TaskFlow.Example ")

    seed_admin.main()

    assert User.query.filter_by(email="boss@taskflow.example").count() == 1
    response = client.post(
        "/api/auth/login",
        json={"email": "Boss@TaskFlow.Example", "password": seed_admin.ADMIN_PASSWORD, "role": "admin"},
    )
    assert response.status_code == 200
