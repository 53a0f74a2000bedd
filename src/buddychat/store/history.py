"""Persistent message history.

Owns the snapshot format: a JSON array of ``{id, text, author, timestamp}``
records stored under a single key. Loading fails closed: any malformed
record discards the whole snapshot.
"""

import json
import re
from collections.abc import Callable, Iterable

from pydantic import TypeAdapter, ValidationError

from ..config import STORAGE_KEY
from ..models import Message
from .base import KeyValueBackend

DebugCallback = Callable[[str, str, str], None]

_SNAPSHOT = TypeAdapter(list[Message])
_RECORD_FIELDS = ("id", "text", "author", "timestamp")
_ISO_TIMESTAMP = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}")


class CorruptSnapshotError(ValueError):
    """Raised internally when a stored snapshot cannot be decoded."""


def encode_snapshot(messages: Iterable[Message]) -> str:
    """Serialize messages to the snapshot format, dropping placeholders."""
    records = [
        msg.model_dump(mode="json", exclude={"placeholder"})
        for msg in messages
        if not msg.placeholder
    ]
    return json.dumps(records, ensure_ascii=False)


def decode_snapshot(raw: str) -> list[Message]:
    """Parse a snapshot.

    Raises:
        CorruptSnapshotError: If the snapshot is not a valid list of messages
    """
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CorruptSnapshotError(f"invalid JSON: {e}") from e
    except RecursionError as e:
        raise CorruptSnapshotError("snapshot is nested too deeply") from e

    if not isinstance(data, list):
        raise CorruptSnapshotError(f"expected a list, got {type(data).__name__}")

    for index, record in enumerate(data):
        if not isinstance(record, dict):
            raise CorruptSnapshotError(f"record {index} is not an object")
        # Placeholders are never persisted; a stored one means tampering.
        if record.get("placeholder"):
            raise CorruptSnapshotError(f"record {index} is a placeholder")
        missing = [name for name in _RECORD_FIELDS if name not in record]
        if missing:
            raise CorruptSnapshotError(f"record {index} is missing {', '.join(missing)}")
        # Lax validation would read numbers as Unix times.
        timestamp = record["timestamp"]
        if not isinstance(timestamp, str) or not _ISO_TIMESTAMP.match(timestamp):
            raise CorruptSnapshotError(f"record {index} timestamp is not ISO-8601 text")

    try:
        messages = _SNAPSHOT.validate_python(data)
    except ValidationError as e:
        raise CorruptSnapshotError(str(e)) from e

    seen: set[str] = set()
    for msg in messages:
        if msg.id in seen:
            raise CorruptSnapshotError(f"duplicate message id {msg.id!r}")
        seen.add(msg.id)

    return messages


class MessageHistoryStore:
    """Load, save and clear the persisted message sequence.

    None of the operations raise: read and write failures are reported
    through the debug callback and the conversation carries on in memory.
    """

    def __init__(self, backend: KeyValueBackend, key: str = STORAGE_KEY):
        self._backend = backend
        self._key = key
        self._debug_callback: DebugCallback | None = None

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set the debug callback.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Store", message)

    def load(self) -> list[Message]:
        """Read the persisted snapshot.

        Returns:
            The stored messages, or an empty list if nothing is stored or
            the snapshot is unreadable
        """
        try:
            raw = self._backend.get(self._key)
        except OSError as e:
            self._debug("warning", f"Could not read saved messages: {e}")
            return []

        if raw is None:
            self._debug("debug", "No saved messages")
            return []

        try:
            messages = decode_snapshot(raw)
        except CorruptSnapshotError as e:
            self._debug("warning", f"Discarding corrupt saved messages: {e}")
            return []

        self._debug("info", f"Loaded {len(messages)} message(s) from {self._backend.backend_type}")
        return messages

    def save(self, messages: Iterable[Message]) -> bool:
        """Overwrite the snapshot with ``messages`` (placeholders excluded).

        Returns:
            True if the snapshot was written
        """
        payload = encode_snapshot(messages)
        try:
            self._backend.set(self._key, payload)
        except OSError as e:
            self._debug("error", f"Failed to save messages: {e}")
            return False
        return True

    def clear(self) -> None:
        """Remove the snapshot entirely."""
        try:
            self._backend.delete(self._key)
        except OSError as e:
            self._debug("error", f"Failed to clear saved messages: {e}")

    @property
    def backend(self) -> KeyValueBackend:
        return self._backend
