"""Tests for the Flask application factory."""
from __future__ import annotations

import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from services.mailer import MemoryMailer  # noqa: E402


def test_health_endpoint_returns_ok(client):
    """The health endpoint should respond with an OK payload."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.get_json() == {"status": "ok"}


def test_blueprints_registered(app):
    """Application factory should register expected blueprints."""
    bps = set(app.blueprints.keys())
    assert {"auth", "password", "admin"}.issubset(bps)


def test_routes_mounted_under_expected_prefixes(app):
    rules = {rule.rule for rule in app.url_map.iter_rules()}
    assert "/api/auth/register" in rules
    assert "/api/auth/login" in rules
    assert "/api/forgot-password" in rules
    assert "/api/reset-password" in rules
    assert "/admin/users" in rules
    assert "/admin/users/<string:email>" in rules


def test_memory_mailer_selected_by_config(app):
    assert isinstance(app.extensions["mailer"], MemoryMailer)
