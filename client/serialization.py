"""JSON helpers shared by the client stores."""

from __future__ import annotations

import json
from typing import Any

from storage import AbstractStorage

from .errors import StorageError


def read_json(storage: AbstractStorage, key: str, default: Any = None) -> Any:
    raw = storage.get(key)
    if raw is None or raw == "":
        return default
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise StorageError(f"Stored value for {key!r} is not valid JSON") from exc


def write_json(storage: AbstractStorage, key: str, value: Any) -> str:
    """Serialize ``value`` under ``key`` and return the serialized text."""
    serialized = json.dumps(value)
    storage.set(key, serialized)
    return serialized
