"""Reveal module for buddychat.

Incremental, tick-driven disclosure of assistant message text.
"""

from .engine import RevealEngine, RevealState

__all__ = ["RevealEngine", "RevealState"]
