"""Local filesystem storage implementation."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Iterator

from werkzeug.utils import secure_filename

from config import Config

from .abstract_storage import AbstractStorage

_SUFFIX = ".json"


class LocalStorage(AbstractStorage):
    """Persist each key as a file under the configured client storage directory."""

    def __init__(self, storage_dir: str | None = None):
        self.base_directory = Path(storage_dir or Config.CLIENT_STORAGE_DIR)
        os.makedirs(self.base_directory, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        safe_name = secure_filename(key)
        if not safe_name:
            raise ValueError("Key must contain at least one valid character.")
        return self.base_directory / f"{safe_name}{_SUFFIX}"

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        """Write the value atomically so readers never see a partial file."""

        destination = self._path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self.base_directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as output:
                output.write(value)
            os.replace(tmp_name, destination)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def remove(self, key: str) -> None:
        path = self._path_for(key)
        if path.exists():
            path.unlink()

    def keys(self) -> Iterator[str]:
        for path in sorted(self.base_directory.glob(f"*{_SUFFIX}")):
            yield path.name[: -len(_SUFFIX)]
