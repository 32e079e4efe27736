"""Credential validation, session tokens and the password-reset lifecycle."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from flask import current_app
from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import BadRequest

from models import db
from models.user import DEFAULT_ROLE, ROLES, User
from services.errors import (
    DuplicateEmail,
    InvalidCredentials,
    InvalidOrExpiredToken,
    ServerError,
    Unauthorized,
    UnauthorizedRole,
    UserNotFound,
)
from services.mailer import OutgoingMessage, get_mailer
from utils.security import generate_reset_token


@dataclass(frozen=True)
class AuthResult:
    token: str
    user_id: int
    role: str


@dataclass(frozen=True)
class SessionIdentity:
    user_id: int
    role: str
    email: str | None = None


def normalize_email(raw_email: str | None) -> str:
    """Normalize an email string by stripping whitespace and lowering case."""
    return (raw_email or "").strip().lower()


def normalize_role(raw_role: str | None) -> str | None:
    """Return the lower-cased role or None when not supplied.

    Raises BadRequest for roles outside the known set.
    """
    role = (raw_role or "").strip().lower()
    if not role:
        return None
    if role not in ROLES:
        raise BadRequest("Role must be one of: {}.".format(", ".join(ROLES)))
    return role


def _validate_password(password: str) -> None:
    minimum = int(current_app.config.get("MIN_PASSWORD_LENGTH", 6))
    if len(password) < minimum:
        raise BadRequest(f"Password must be at least {minimum} characters.")


def is_duplicate_email(error: IntegrityError) -> bool:
    """True when ``error`` is a violation of the unique email index."""
    message = str(error.orig).lower()
    return ("unique" in message or "duplicate" in message) and "email" in message


def issue_session_token(user: User) -> str:
    return create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role, "email": user.email},
    )


def register(full_name: str, email: str, password: str, role: str | None = None) -> AuthResult:
    """Create a user and return a fresh session token."""

    email = normalize_email(email)
    if not email or not password:
        raise BadRequest("Email and password are required.")
    _validate_password(password)
    role = normalize_role(role) or DEFAULT_ROLE

    user = User(full_name=(full_name or "").strip(), email=email, role=role)
    user.set_password(password, rounds=current_app.config.get("BCRYPT_ROUNDS", 10))

    # The unique index on users.email turns concurrent duplicate
    # registrations into an IntegrityError for all but one writer.
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        if not is_duplicate_email(exc):
            raise
        current_app.logger.info("Registration rejected for existing email %s", email)
        raise DuplicateEmail()

    current_app.logger.info("Registered user id=%s role=%s", user.id, user.role)
    return AuthResult(token=issue_session_token(user), user_id=user.id, role=user.role)


def login(email: str, password: str, role: str | None = None) -> AuthResult:
    """Authenticate credentials and return a session token."""

    email = normalize_email(email)
    if not email or not password:
        raise BadRequest("Email and password are required.")

    user = User.query.filter_by(email=email).first()
    if user is None or not user.check_password(password):
        current_app.logger.warning("Failed login for %s", email)
        raise InvalidCredentials()

    requested_role = (role or "").strip().lower()
    if requested_role and requested_role != user.role:
        current_app.logger.warning(
            "Role mismatch for %s: requested=%s stored=%s", email, requested_role, user.role
        )
        raise UnauthorizedRole()

    return AuthResult(token=issue_session_token(user), user_id=user.id, role=user.role)


def request_password_reset(email: str) -> str:
    """Store a time-boxed reset token and mail a reset link to the user.

    Returns the generated token. The token is committed before the mail is
    sent; a delivery failure leaves it in place until it expires.
    """

    email = normalize_email(email)
    if not email:
        raise BadRequest("Email is required.")

    user = User.query.filter_by(email=email).first()
    if user is None:
        raise UserNotFound()

    ttl = timedelta(minutes=int(current_app.config.get("RESET_TOKEN_TTL_MINUTES", 15)))
    token = generate_reset_token()
    user.issue_reset_token(token, datetime.utcnow() + ttl)
    db.session.commit()

    reset_link = "{}?token={}".format(current_app.config["RESET_URL_BASE"], token)
    message = OutgoingMessage(
        recipient=user.email,
        subject="Reset Your Password",
        body=f"Click the link to reset your password: {reset_link}",
    )
    try:
        get_mailer().send(message)
    except Exception as exc:
        current_app.logger.exception("Failed to send password reset mail to %s", user.email)
        raise ServerError() from exc

    current_app.logger.info("Password reset link sent to user id=%s", user.id)
    return token


def reset_password(token: str, new_password: str) -> User:
    """Replace the password of the user holding a live reset token."""

    if not token:
        raise InvalidOrExpiredToken()
    if not new_password:
        raise BadRequest("Password is required.")
    _validate_password(new_password)

    user = User.query.filter_by(reset_token=token).first()
    if user is None or not user.reset_token_valid(token):
        raise InvalidOrExpiredToken()

    user.set_password(new_password, rounds=current_app.config.get("BCRYPT_ROUNDS", 10))
    user.clear_reset_token()
    db.session.commit()

    current_app.logger.info("Password reset completed for user id=%s", user.id)
    return user


def verify_session_token(token: str | None) -> SessionIdentity:
    """Decode a session token, checking only its signature and expiry."""

    if not token:
        raise Unauthorized()
    try:
        claims = decode_token(token)
    except (PyJWTError, JWTExtendedException) as exc:
        raise Unauthorized("Invalid token") from exc

    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise Unauthorized("Invalid token") from exc
    return SessionIdentity(
        user_id=user_id,
        role=claims.get("role", DEFAULT_ROLE),
        email=claims.get("email"),
    )
