"""Capability interfaces injected at the core's boundary.

The core never constructs these itself: the front end hands in whatever
dictation source or theme switch the environment offers.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable


class DictationCapability(ABC):
    """Source of already-transcribed speech."""

    @property
    @abstractmethod
    def available(self) -> bool:
        """Whether dictation can be used in this environment."""

    @abstractmethod
    async def listen(self) -> str | None:
        """Capture one utterance.

        Returns:
            The transcript, or None if nothing was recognized
        """


class ScriptedDictation(DictationCapability):
    """Replays prepared transcripts in order."""

    def __init__(self, transcripts: Iterable[str] = ()):
        self._transcripts = list(transcripts)

    @property
    def available(self) -> bool:
        return True

    async def listen(self) -> str | None:
        if not self._transcripts:
            return None
        return self._transcripts.pop(0)

    @property
    def remaining(self) -> int:
        return len(self._transcripts)


class ThemeToggle(ABC):
    """Switch between light and dark presentation."""

    @property
    @abstractmethod
    def is_dark(self) -> bool:
        """Whether the dark theme is active."""

    @abstractmethod
    def toggle(self) -> bool:
        """Flip the theme.

        Returns:
            True if the dark theme is now active
        """
