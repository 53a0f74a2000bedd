from abc import ABC, abstractmethod
from collections.abc import Callable

DebugCallback = Callable[[str, str, str], None]


class ResponseGenerationError(Exception):
    """Raised when the assistant fails to produce a reply."""


class ResponseGenerator(ABC):
    """Abstract base class for assistant response generators.

    This module hides the design decision of where replies come from.
    Implementations must be non-blocking: ``generate`` suspends on the event
    loop rather than blocking it, and must be safe to cancel at any await.
    """

    def __init__(self) -> None:
        self._debug_callback: DebugCallback | None = None

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set debug callback for logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        """Send debug message if callback is set."""
        if self._debug_callback:
            self._debug_callback(level, "Responder", message)

    @abstractmethod
    async def generate(self, user_text: str) -> str:
        """Produce the assistant's reply to ``user_text``.

        Args:
            user_text: The user's message

        Returns:
            Reply text

        Raises:
            ResponseGenerationError: If no reply could be produced
        """
        pass
