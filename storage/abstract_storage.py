"""Storage abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator


class AbstractStorage(ABC):
    """Interface for persistent string key-value backends."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value for ``key`` or None when absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete ``key`` if present."""

    @abstractmethod
    def keys(self) -> Iterator[str]:
        """Iterate over the stored keys."""

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
