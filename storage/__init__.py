"""Storage backends."""

from .abstract_storage import AbstractStorage
from .local_storage import LocalStorage
from .memory_storage import MemoryStorage

__all__ = ["AbstractStorage", "LocalStorage", "MemoryStorage"]
