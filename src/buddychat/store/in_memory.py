"""In-memory key-value backend.

Simple dict-based storage for session-only persistence.
Data is lost when the application exits.
"""

from .base import KeyValueBackend


class InMemoryBackend(KeyValueBackend):
    """In-memory key-value store (session-only).

    Suitable for single-session use or testing. Set ``fail_writes`` to make
    every write raise, simulating an exhausted storage quota.
    """

    def __init__(self, initial: dict[str, str] | None = None, fail_writes: bool = False):
        self._data: dict[str, str] = dict(initial or {})
        self.fail_writes = fail_writes

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise OSError("storage quota exceeded")
        self._data[key] = value

    def delete(self, key: str) -> None:
        if self.fail_writes:
            raise OSError("storage is read-only")
        self._data.pop(key, None)

    @property
    def backend_type(self) -> str:
        return "memory"
