"""Client-only account list used by the offline login path.

These accounts live in client storage next to the tasks and are not the
server's users: signing up here creates nothing on the server and a
server account cannot log in here. The issued token is an opaque local
string, not a signed session token.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime

from storage import AbstractStorage
from utils.security import DEFAULT_BCRYPT_ROUNDS, check_password, hash_password

from .audit_log import AuditLog
from .errors import DuplicateAccount, InvalidLocalCredentials
from .serialization import read_json, write_json

logger = logging.getLogger(__name__)

ACCOUNTS_KEY = "users"
MIN_PASSWORD_LENGTH = 6
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEMO_ACCOUNTS = (
    ("admin@example.com", "password123", "admin", "admin-123"),
    ("user@example.com", "password123", "user", "user-456"),
)


@dataclass(frozen=True)
class LocalLogin:
    token: str
    user_id: str
    role: str
    email: str


def _local_token() -> str:
    return f"local-token-{int(time.time() * 1000)}"


class LocalAccountStore:
    def __init__(
        self,
        storage: AbstractStorage,
        audit_log: AuditLog | None = None,
        rounds: int = DEFAULT_BCRYPT_ROUNDS,
    ):
        self.storage = storage
        self.audit_log = audit_log
        self.rounds = rounds

    def accounts(self) -> list[dict]:
        stored = read_json(self.storage, ACCOUNTS_KEY, default=None)
        if isinstance(stored, list):
            return stored
        accounts = [
            {
                "email": email,
                "passwordHash": hash_password(password, rounds=self.rounds),
                "role": role,
                "userId": user_id,
            }
            for email, password, role, user_id in DEMO_ACCOUNTS
        ]
        write_json(self.storage, ACCOUNTS_KEY, accounts)
        return accounts

    def signup(
        self,
        full_name: str,
        email: str,
        password: str,
        confirm_password: str | None = None,
        role: str = "user",
    ) -> LocalLogin:
        email = (email or "").strip()
        if not (full_name or "").strip():
            raise ValueError("Full name is required")
        if not email:
            raise ValueError("Email is required")
        if not _EMAIL_RE.match(email):
            raise ValueError("Please enter a valid email address")
        if confirm_password is not None and password != confirm_password:
            raise ValueError("Passwords do not match")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        if role not in ("user", "admin"):
            raise ValueError(f"Unknown role: {role!r}")

        accounts = self.accounts()
        if any(a.get("email") == email for a in accounts):
            raise DuplicateAccount("Email already in use")

        account = {
            "email": email,
            "passwordHash": hash_password(password, rounds=self.rounds),
            "role": role,
            "userId": f"user-{int(time.time() * 1000)}",
            "fullName": full_name.strip(),
            "createdAt": datetime.utcnow().isoformat(),
        }
        accounts.append(account)
        write_json(self.storage, ACCOUNTS_KEY, accounts)

        result = LocalLogin(_local_token(), account["userId"], role, email)
        if self.audit_log is not None:
            self.audit_log.record(
                result.user_id, email, role, "register", result.token,
                full_name=account["fullName"],
            )
        return result

    def login(self, email: str, password: str) -> LocalLogin:
        email = (email or "").strip()
        if not email or not (password or "").strip():
            raise ValueError("Email and password are required")

        for account in self.accounts():
            if account.get("email") == email and check_password(password, account.get("passwordHash")):
                result = LocalLogin(_local_token(), account["userId"], account["role"], email)
                if self.audit_log is not None:
                    self.audit_log.record(result.user_id, email, result.role, "login", result.token)
                return result

        logger.info("Local login failed for %s", email)
        raise InvalidLocalCredentials("Invalid email or password")
