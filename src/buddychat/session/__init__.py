"""Conversation session module.

Owns the message sequence and coordinates persistence, the response
generator and the reveal engine.
"""

from ..models import Author, Message, SessionSettings, SessionState
from .controller import PendingExchange, SessionController

__all__ = [
    "Author",
    "Message",
    "PendingExchange",
    "SessionController",
    "SessionSettings",
    "SessionState",
]
