"""Persistence module for buddychat.

Provides key-value backends and the message history store built on them.
"""

from .base import KeyValueBackend
from .factory import create_backend
from .history import CorruptSnapshotError, MessageHistoryStore, decode_snapshot, encode_snapshot

__all__ = [
    "CorruptSnapshotError",
    "KeyValueBackend",
    "MessageHistoryStore",
    "create_backend",
    "decode_snapshot",
    "encode_snapshot",
]
