"""Client session state and route gating."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from storage import AbstractStorage

from .audit_log import AuditLog

TOKEN_KEY = "token"
ROLE_KEY = "userRole"
USER_ID_KEY = "userId"
EMAIL_KEY = "email"
_SESSION_KEYS = (TOKEN_KEY, ROLE_KEY, USER_ID_KEY, EMAIL_KEY)

LOGIN_PATH = "/login"
DASHBOARDS = {"admin": "/admin/dashboard", "user": "/user/dashboard"}


@dataclass(frozen=True)
class RouteDecision:
    allowed: bool
    redirect_to: str | None = None
    return_to: str | None = None


class SessionClient:
    def __init__(self, storage: AbstractStorage, audit_log: AuditLog | None = None):
        self.storage = storage
        self.audit_log = audit_log

    def establish(self, token: str, role: str, user_id, email: str) -> None:
        if not token:
            raise ValueError("A session token is required")
        self.storage.set(TOKEN_KEY, token)
        self.storage.set(ROLE_KEY, role or "user")
        self.storage.set(USER_ID_KEY, str(user_id))
        self.storage.set(EMAIL_KEY, email)

    def establish_from_response(self, payload: Mapping, email: str) -> None:
        """Store the session returned by the register or login endpoints."""
        self.establish(
            token=payload.get("token"),
            role=payload.get("role") or "user",
            user_id=payload.get("userId", ""),
            email=email,
        )

    def logout(self) -> None:
        user_id = self.user_id
        for key in _SESSION_KEYS:
            self.storage.remove(key)
        if user_id and self.audit_log is not None:
            self.audit_log.record_logout(user_id)

    @property
    def token(self) -> str | None:
        return self.storage.get(TOKEN_KEY)

    @property
    def role(self) -> str | None:
        return self.storage.get(ROLE_KEY)

    @property
    def user_id(self) -> str | None:
        return self.storage.get(USER_ID_KEY)

    @property
    def email(self) -> str | None:
        return self.storage.get(EMAIL_KEY)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def has_role(self, role: str) -> bool:
        return self.role == role

    def auth_headers(self) -> dict[str, str]:
        """Headers carrying the raw session token for API calls."""
        token = self.token
        return {"Authorization": token} if token else {}

    def home_path(self) -> str:
        return DASHBOARDS.get(self.role or "user", DASHBOARDS["user"])

    def route_decision(self, path: str, required_role: str | None = None) -> RouteDecision:
        if not self.is_authenticated:
            return RouteDecision(False, redirect_to=LOGIN_PATH, return_to=path)
        if required_role and not self.has_role(required_role):
            return RouteDecision(False, redirect_to=self.home_path())
        return RouteDecision(True)
