"""Abstract base class for key-value persistence backends.

This module defines the interface the message history is persisted through.
The abstraction hides:
- Storage medium (memory, files on disk, etc.)
- Write strategy (atomic replace, in-place, etc.)
"""

from abc import ABC, abstractmethod


class KeyValueBackend(ABC):
    """Abstract string key-value store.

    Provides a unified synchronous interface for storing and retrieving
    serialized snapshots across different storage backends. Implementations
    raise ``OSError`` on read or write failure; callers decide how to recover.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the value stored under ``key``, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``. Deleting a missing key is not an error."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""
