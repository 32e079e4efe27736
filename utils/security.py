"""Password hashing and one-time token helpers."""

from __future__ import annotations

import secrets

import bcrypt

DEFAULT_BCRYPT_ROUNDS = 10
# bcrypt ignores everything past 72 bytes; truncate explicitly so that
# hashing and checking agree on the input.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """Return a salted bcrypt hash of ``password``."""

    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def check_password(password: str, password_hash: str | None) -> bool:
    """Verify a password against a stored bcrypt hash."""

    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_password_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash.
        return False


def generate_reset_token(nbytes: int = 32) -> str:
    """Return a random URL-safe token for password resets."""

    return secrets.token_urlsafe(nbytes)
