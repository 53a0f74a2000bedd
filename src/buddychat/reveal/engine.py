"""Character-by-character reveal of assistant messages.

Hides how the perceived "typing" effect is driven: one asyncio task per
revealing message, advancing one character per tick until the full text is
visible. Each task is keyed by message id so a discarded message can have
its pending ticks cancelled.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ..config import REVEAL_TICK_INTERVAL
from ..models import Message

RevealCallback = Callable[[str, str], None]
DebugCallback = Callable[[str, str, str], None]
SleepFunc = Callable[[float], Awaitable[None]]


@dataclass
class RevealState:
    """Reveal progress for one message. Forward-only."""

    message_id: str
    full_text: str
    revealed_length: int = 0

    @property
    def done(self) -> bool:
        return self.revealed_length >= len(self.full_text)

    @property
    def visible_text(self) -> str:
        return self.full_text[:self.revealed_length]


class RevealEngine:
    """Drives reveal state machines for finalized assistant messages.

    User messages and placeholders bypass the engine: their visible text is
    always the full text. A message id can be attached once; a finished or
    cancelled reveal is never restarted.
    """

    def __init__(
        self,
        tick_interval: float = REVEAL_TICK_INTERVAL,
        sleep: SleepFunc | None = None,
    ) -> None:
        if tick_interval <= 0:
            raise ValueError(f"tick_interval must be positive, got {tick_interval}")
        self._tick_interval = tick_interval
        self._sleep = sleep or asyncio.sleep
        self._states: dict[str, RevealState] = {}
        self._tasks: dict[str, asyncio.Task] = {}
        self._reveal_callback: RevealCallback | None = None
        self._debug_callback: DebugCallback | None = None

    def set_reveal_callback(self, callback: RevealCallback | None) -> None:
        """Set the callback receiving each revealed frame.

        Args:
            callback: Callable(message_id: str, visible_text: str)
        """
        self._reveal_callback = callback

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set debug callback for logging.

        Args:
            callback: Callable(level: str, component: str, message: str)
        """
        self._debug_callback = callback

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Reveal", message)

    @staticmethod
    def applies_to(message: Message) -> bool:
        """Whether ``message`` is revealed gradually."""
        return not message.is_user and not message.placeholder

    def attach(self, message: Message, autostart: bool = True) -> bool:
        """Start revealing ``message``.

        Args:
            message: A finalized assistant message
            autostart: Start the ticking task (requires a running event loop).
                When False, the caller drives progress with ``tick``.

        Returns:
            True if a new reveal was started
        """
        if not self.applies_to(message) or message.id in self._states:
            return False

        state = RevealState(message_id=message.id, full_text=message.text)
        self._states[message.id] = state
        if state.done:
            return True

        if autostart:
            task = asyncio.get_running_loop().create_task(self._run(message.id))
            self._tasks[message.id] = task
            task.add_done_callback(lambda _t, mid=message.id: self._forget_task(mid, _t))
        self._debug("debug", f"Revealing {message.id} ({len(message.text)} chars)")
        return True

    def complete(self, message: Message) -> None:
        """Register ``message`` as already fully revealed (e.g. restored history)."""
        if not self.applies_to(message) or message.id in self._states:
            return
        self._states[message.id] = RevealState(
            message_id=message.id,
            full_text=message.text,
            revealed_length=len(message.text),
        )

    def tick(self, message_id: str) -> bool:
        """Advance one character and emit the new prefix.

        Returns:
            True if progress was made, False if the reveal is terminal or
            the id is unknown
        """
        state = self._states.get(message_id)
        if state is None or state.done:
            return False

        state.revealed_length += 1
        if self._reveal_callback:
            self._reveal_callback(message_id, state.visible_text)
        return True

    async def _run(self, message_id: str) -> None:
        while True:
            await self._sleep(self._tick_interval)
            if not self.tick(message_id):
                break

    def _forget_task(self, message_id: str, task: asyncio.Task) -> None:
        if self._tasks.get(message_id) is task:
            del self._tasks[message_id]

    def cancel(self, message_id: str) -> None:
        """Discard the reveal for ``message_id`` and any pending ticks."""
        task = self._tasks.pop(message_id, None)
        if task is not None and not task.done():
            task.cancel()
            self._debug("debug", f"Cancelled reveal of {message_id}")
        self._states.pop(message_id, None)

    def cancel_all(self) -> None:
        """Discard every reveal."""
        for message_id in list(self._states):
            self.cancel(message_id)

    def visible_text(self, message: Message) -> str:
        """Text the renderer should show for ``message`` right now."""
        if not self.applies_to(message):
            return message.text
        state = self._states.get(message.id)
        if state is None:
            return message.text
        return state.visible_text

    def revealed_length(self, message_id: str) -> int | None:
        state = self._states.get(message_id)
        return state.revealed_length if state else None

    def is_revealing(self, message_id: str) -> bool:
        state = self._states.get(message_id)
        return state is not None and not state.done

    async def wait(self, message_id: str) -> None:
        """Wait until the reveal of ``message_id`` finishes or is cancelled."""
        task = self._tasks.get(message_id)
        if task is not None:
            await asyncio.wait({task})

    @property
    def active_ids(self) -> list[str]:
        """Ids of messages still being revealed."""
        return [mid for mid, state in self._states.items() if not state.done]
