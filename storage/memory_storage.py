"""In-memory storage implementation."""

from __future__ import annotations

from typing import Iterator

from .abstract_storage import AbstractStorage


class MemoryStorage(AbstractStorage):
    """Keep values in a dict; nothing survives the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> Iterator[str]:
        return iter(list(self._data))
