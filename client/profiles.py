"""Free-text notes and per-role profile blobs."""

from __future__ import annotations

from datetime import datetime

from storage import AbstractStorage

from .serialization import read_json, write_json

NOTES_KEY = "notes"
ADMIN_ACTIVITY_KEY = "adminActivityLog"
ADMIN_ACTIVITY_LIMIT = 5

PROFILE_DEFAULTS = {
    "user": {
        "name": "",
        "email": "",
        "phone": "",
        "address": "",
        "dob": "",
        "role": "",
        "linkedin": "",
        "github": "",
        "profilePic": "",
    },
    "admin": {
        "name": "Admin User",
        "email": "admin@example.com",
        "profilePic": "",
        "role": "Admin",
    },
}


class NotesStore:
    """Notes are stored as plain text, not JSON."""

    def __init__(self, storage: AbstractStorage, key: str = NOTES_KEY):
        self.storage = storage
        self.key = key

    def get(self) -> str:
        return self.storage.get(self.key) or ""

    def set(self, text: str) -> None:
        self.storage.set(self.key, text or "")

    def clear(self) -> None:
        self.storage.remove(self.key)


class ProfileStore:
    def __init__(self, storage: AbstractStorage, role: str = "user"):
        if role not in PROFILE_DEFAULTS:
            raise ValueError(f"Unknown profile role: {role!r}")
        self.storage = storage
        self.role = role
        self.key = f"{role}Profile"

    def get(self) -> dict:
        stored = read_json(self.storage, self.key, default=None)
        if not isinstance(stored, dict):
            return dict(PROFILE_DEFAULTS[self.role])
        return {**PROFILE_DEFAULTS[self.role], **stored}

    def update(self, **fields) -> dict:
        unknown = set(fields) - set(PROFILE_DEFAULTS[self.role])
        if unknown:
            raise ValueError("Unknown profile fields: {}".format(", ".join(sorted(unknown))))
        profile = {**self.get(), **fields}
        write_json(self.storage, self.key, profile)
        if self.role == "admin":
            self._log_activity(f"Updated profile on {datetime.utcnow().isoformat()}")
        return profile

    def activity(self) -> list[str]:
        entries = read_json(self.storage, ADMIN_ACTIVITY_KEY, default=[])
        return entries if isinstance(entries, list) else []

    def _log_activity(self, message: str) -> None:
        # newest first, capped
        entries = [message] + self.activity()[: ADMIN_ACTIVITY_LIMIT - 1]
        write_json(self.storage, ADMIN_ACTIVITY_KEY, entries)
