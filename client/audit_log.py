"""Login/registration audit entries kept in client storage."""

from __future__ import annotations

import logging
import time
from datetime import datetime

from storage import AbstractStorage

from .serialization import read_json, write_json

logger = logging.getLogger(__name__)

AUDIT_LOG_KEY = "userLogs"
LOG_SORT_KEYS = ("username", "role", "action", "loginTime", "logoutTime")
ACTIONS = ("login", "register")


def truncate_token(token: str) -> str:
    return f"{token[:10]}..."


class AuditLog:
    def __init__(self, storage: AbstractStorage, key: str = AUDIT_LOG_KEY):
        self.storage = storage
        self.key = key

    def _load(self) -> list[dict]:
        entries = read_json(self.storage, self.key, default=[])
        return entries if isinstance(entries, list) else []

    def _save(self, entries: list[dict]) -> None:
        write_json(self.storage, self.key, entries)

    def record(
        self,
        user_id: str,
        username: str,
        role: str,
        action: str,
        token: str,
        full_name: str | None = None,
        ip_address: str = "127.0.0.1",
    ) -> dict:
        if action not in ACTIONS:
            raise ValueError(f"Unknown audit action: {action!r}")

        entries = self._load()
        taken = {str(e.get("id")) for e in entries}
        entry_id = int(time.time() * 1000)
        while str(entry_id) in taken:
            entry_id += 1

        entry = {
            "id": str(entry_id),
            "userId": user_id,
            "username": username,
            "role": role,
            "action": action,
            "loginTime": datetime.utcnow().isoformat(),
            "logoutTime": None,
            "ipAddress": ip_address,
            "tokenName": truncate_token(token),
        }
        if full_name:
            entry["fullName"] = full_name
        entries.append(entry)
        self._save(entries)
        logger.info("Audit %s for %s", action, username)
        return entry

    def record_logout(self, user_id: str) -> dict | None:
        """Stamp the logout time on the user's most recent open entry."""
        entries = self._load()
        for entry in reversed(entries):
            if entry.get("userId") == user_id and not entry.get("logoutTime"):
                entry["logoutTime"] = datetime.utcnow().isoformat()
                self._save(entries)
                return entry
        return None

    def entries(
        self,
        role: str = "all",
        search: str = "",
        sort_key: str = "loginTime",
        descending: bool = False,
    ) -> list[dict]:
        if sort_key not in LOG_SORT_KEYS:
            raise ValueError(f"Unknown sort key: {sort_key!r}")

        result = self._load()
        if role and role != "all":
            result = [e for e in result if e.get("role") == role]

        term = (search or "").strip().lower()
        if term:
            result = [
                e for e in result
                if term in str(e.get("username", "")).lower()
                or term in str(e.get("userId", "")).lower()
                or term in str(e.get("ipAddress") or "")
            ]

        present = [e for e in result if e.get(sort_key) is not None]
        missing = [e for e in result if e.get(sort_key) is None]
        present.sort(key=lambda e: e[sort_key], reverse=descending)
        return present + missing

    def delete(self, entry_id: str) -> bool:
        entries = self._load()
        remaining = [e for e in entries if str(e.get("id")) != str(entry_id)]
        if len(remaining) == len(entries):
            return False
        self._save(remaining)
        return True
