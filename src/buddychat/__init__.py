"""
buddychat: the conversational core of a chat widget.

Keeps an ordered, persisted message history, simulates an asynchronous
assistant, and reveals incoming assistant text character by character.
Each module hides a specific design decision.
"""

__version__ = "0.1.0"

from .capabilities import DictationCapability, ScriptedDictation, ThemeToggle
from .models import Author, Message, SessionSettings, SessionState
from .responder import ResponseGenerationError, ResponseGenerator, SimulatedResponseGenerator
from .reveal import RevealEngine
from .session import SessionController
from .store import KeyValueBackend, MessageHistoryStore, create_backend

__all__ = [
    "Author",
    "DictationCapability",
    "KeyValueBackend",
    "Message",
    "MessageHistoryStore",
    "ResponseGenerationError",
    "ResponseGenerator",
    "RevealEngine",
    "ScriptedDictation",
    "SessionController",
    "SessionSettings",
    "SessionState",
    "SimulatedResponseGenerator",
    "ThemeToggle",
    "create_backend",
]
