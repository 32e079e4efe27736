"""Shared pytest fixtures for the application tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from flask import Flask
from flask.testing import FlaskClient

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from app import create_app  # noqa: E402
from config import Config  # noqa: E402
from models import db  # noqa: E402
from services.mailer import MemoryMailer  # noqa: E402
from storage import MemoryStorage  # noqa: E402


class _BaseTestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = "test-secret-key-with-enough-length-0123456789"
    JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length-0123456789"
    BCRYPT_ROUNDS = 4
    MAIL_BACKEND = "memory"
    RATE_LIMIT = "1000 per minute"
    ADMIN_API_REQUIRE_AUTH = True


@pytest.fixture()
def app(tmp_path) -> Flask:
    """Create a Flask application instance for tests."""

    class TestConfig(_BaseTestConfig):
        CLIENT_STORAGE_DIR = str(tmp_path / "client-storage")

    application = create_app(TestConfig)

    with application.app_context():
        db.create_all()

    yield application

    with application.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a test client for the Flask app."""

    return app.test_client()


@pytest.fixture()
def db_session(app: Flask):
    """Yield the database session inside an application context."""

    with app.app_context():
        yield db.session


@pytest.fixture()
def mailer(app: Flask) -> MemoryMailer:
    """The in-memory mailer configured for the test app."""

    return app.extensions["mailer"]


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()
