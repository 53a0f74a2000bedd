"""File-backed key-value backend.

Stores each key as a JSON file inside a data directory, so the conversation
survives application restarts.
"""

import os
import re
import tempfile
from pathlib import Path

from .base import KeyValueBackend

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]")


class FileBackend(KeyValueBackend):
    """Directory of ``<key>.json`` files.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace`` so a crash never leaves a half-written snapshot.
    """

    def __init__(self, path: str | Path = "~/.buddychat"):
        self._dir = Path(path).expanduser()

    def _path_for(self, key: str) -> Path:
        return self._dir / f"{_SAFE_KEY.sub('_', key)}.json"

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise OSError(f"{path} is not valid UTF-8: {e}") from e

    def set(self, key: str, value: str) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        target = self._path_for(key)
        fd, tmp_name = tempfile.mkstemp(dir=self._dir, prefix=f".{target.stem}-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_name, target)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)

    @property
    def backend_type(self) -> str:
        return "file"

    @property
    def data_dir(self) -> Path:
        return self._dir
