"""User model definition."""

from datetime import datetime
from typing import Optional

from utils.security import DEFAULT_BCRYPT_ROUNDS, check_password, hash_password

from . import db


ROLES = ("user", "admin")
DEFAULT_ROLE = "user"


class User(db.Model):
    """Represents a TaskFlow account."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(255), nullable=False, default="")
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(32), nullable=False, default=DEFAULT_ROLE)
    reset_token = db.Column(db.String(255), nullable=True, index=True)
    reset_token_expires = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    def set_password(self, password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> None:
        """Hash and store the password."""

        self.password_hash = hash_password(password, rounds=rounds)

    def check_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""

        return check_password(password, self.password_hash)

    def issue_reset_token(self, token: str, expires_at: datetime) -> None:
        """Store a password-reset token with its expiry."""

        self.reset_token = token
        self.reset_token_expires = expires_at

    def clear_reset_token(self) -> None:
        self.reset_token = None
        self.reset_token_expires = None

    def reset_token_valid(self, token: str, now: Optional[datetime] = None) -> bool:
        """Return True if ``token`` matches and has not yet expired."""

        if not self.reset_token or self.reset_token != token:
            return False
        if self.reset_token_expires is None:
            return False
        return self.reset_token_expires > (now or datetime.utcnow())

    def to_dict(self) -> dict:
        """Serialize the user without credentials."""

        return {
            "id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "role": self.role,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - debugging helper
        return f"<User {self.email}>"
