"""Request guards for session-token authentication and role checks."""

from __future__ import annotations

from functools import wraps
from typing import Callable

from flask import current_app, g, request

from services.auth_service import SessionIdentity, verify_session_token
from services.errors import Forbidden, Unauthorized


def extract_token() -> str | None:
    """Return the raw session token carried by the configured header."""

    header_name = current_app.config.get("JWT_HEADER_NAME", "Authorization")
    header_type = current_app.config.get("JWT_HEADER_TYPE", "")
    raw = (request.headers.get(header_name) or "").strip()
    if not raw:
        return None
    if header_type:
        prefix = f"{header_type} "
        if not raw.startswith(prefix):
            return None
        raw = raw[len(prefix):].strip()
    return raw or None


def current_identity() -> SessionIdentity | None:
    return g.get("session_identity")


def authenticate() -> SessionIdentity:
    token = extract_token()
    if token is None:
        raise Unauthorized()
    identity = verify_session_token(token)
    g.session_identity = identity
    return identity


def token_required(view: Callable) -> Callable:
    """Reject requests without a valid session token (401)."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        authenticate()
        return view(*args, **kwargs)

    return wrapper


def role_required(role: str) -> Callable[[Callable], Callable]:
    """Reject requests whose session token lacks ``role`` (403)."""

    def decorator(view: Callable) -> Callable:
        @wraps(view)
        def wrapper(*args, **kwargs):
            identity = authenticate()
            if identity.role != role:
                raise Forbidden()
            return view(*args, **kwargs)

        return wrapper

    return decorator


def admin_required(view: Callable) -> Callable:
    """Require an admin session unless ``ADMIN_API_REQUIRE_AUTH`` is off."""

    guarded = role_required("admin")(view)

    @wraps(view)
    def wrapper(*args, **kwargs):
        if not current_app.config.get("ADMIN_API_REQUIRE_AUTH", True):
            return view(*args, **kwargs)
        return guarded(*args, **kwargs)

    return wrapper
