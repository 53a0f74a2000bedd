"""Session controller.

Owns the ordered message sequence and orchestrates the send / receive /
clear lifecycle. Everything runs on a single asyncio event loop: the only
suspension points are the response generator's delay, the reveal ticks and
the post-clear greeting delay, each held as a cancellable task handle.

Stale completions are recognized by exchange identity rather than by the
placeholder id, which is reused for every exchange.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ..capabilities import DictationCapability
from ..config import APOLOGY_TEXT, CLEARED_TEXT, WELCOME_TEXT
from ..models import Message, SessionSettings, SessionState
from ..responder import ResponseGenerator, create_response_generator
from ..reveal import RevealEngine
from ..store import MessageHistoryStore, create_backend

ChangeCallback = Callable[[], None]
RevealCallback = Callable[[str, str], None]
DebugCallback = Callable[[str, str, str], None]
SleepFunc = Callable[[float], Awaitable[None]]


@dataclass(eq=False)
class PendingExchange:
    """One in-flight request: the user's message and its placeholder."""

    user_message: Message
    placeholder: Message
    task: asyncio.Task | None = None


class SessionController:
    """Single-session conversation core.

    Example:
        controller = SessionController(store=MessageHistoryStore(backend))
        controller.set_change_callback(renderer.refresh)
        controller.send("What's the weather?")
        await controller.wait_idle()
    """

    def __init__(
        self,
        store: MessageHistoryStore | None = None,
        generator: ResponseGenerator | None = None,
        reveal: RevealEngine | None = None,
        settings: SessionSettings | None = None,
        sleep: SleepFunc | None = None,
        debug_callback: DebugCallback | None = None,
    ) -> None:
        self._settings = settings or SessionSettings()
        self._store = store or MessageHistoryStore(create_backend("memory"))
        self._generator = generator or create_response_generator(settings=self._settings)
        self._reveal = reveal or RevealEngine(tick_interval=self._settings.tick_interval)
        self._sleep = sleep or asyncio.sleep

        self._messages: list[Message] = []
        self._pending: PendingExchange | None = None
        self._greeting_task: asyncio.Task | None = None
        self._change_callback: ChangeCallback | None = None
        self._debug_callback: DebugCallback | None = None

        self.set_debug_callback(debug_callback)
        self._restore()

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def set_change_callback(self, callback: ChangeCallback | None) -> None:
        """Set the callback invoked after every observable change."""
        self._change_callback = callback

    def set_reveal_callback(self, callback: RevealCallback | None) -> None:
        """Set the callback receiving reveal frames.

        Args:
            callback: Callable(message_id: str, visible_text: str)
        """
        self._reveal.set_reveal_callback(callback)

    def set_debug_callback(self, callback: DebugCallback | None) -> None:
        """Set the debug callback for diagnostics.

        Propagated to the store, the generator and the reveal engine.

        Args:
            callback: Callable(level: str, component: str, message: str)
                      level: 'debug', 'info', 'warning', 'error'
        """
        self._debug_callback = callback
        self._store.set_debug_callback(callback)
        self._generator.set_debug_callback(callback)
        self._reveal.set_debug_callback(callback)

    def _debug(self, level: str, message: str) -> None:
        if self._debug_callback:
            self._debug_callback(level, "Session", message)

    def _notify(self) -> None:
        if self._change_callback:
            self._change_callback()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _restore(self) -> None:
        """Load persisted history, or greet an empty session."""
        restored = self._store.load()
        if restored:
            self._messages = restored
            for message in restored:
                self._reveal.complete(message)
            self._debug("info", f"Restored {len(restored)} message(s)")
            return

        greeting = Message.from_assistant(WELCOME_TEXT)
        self._messages = [greeting]
        self._persist()
        self._start_reveal(greeting)

    def _persist(self) -> None:
        self._store.save(self._messages)

    def _start_reveal(self, message: Message) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            # No loop to tick on (constructed outside async code): show in full.
            self._reveal.complete(message)
            return
        self._reveal.attach(message)

    def send(self, text: str) -> bool:
        """Submit user text (typed or dictated).

        Appends the user message and a placeholder as one unit, persists,
        then requests the reply in the background.

        Returns:
            True if the message was accepted; False if ``text`` is blank or
            a request is already in flight
        """
        text = text.strip()
        if not text:
            return False
        if self._pending is not None:
            self._debug("debug", "Ignoring send while a reply is in flight")
            return False

        loop = asyncio.get_running_loop()
        self._cancel_greeting()

        user_message = Message.from_user(text)
        placeholder = Message.pending()
        exchange = PendingExchange(user_message=user_message, placeholder=placeholder)
        self._messages.extend((user_message, placeholder))
        self._pending = exchange
        self._persist()
        self._notify()

        exchange.task = loop.create_task(self._respond(exchange))
        self._debug("info", f"Sent: '{text[:50]}'")
        return True

    def accept_dictation(self, transcript: str) -> bool:
        """Submit dictated text through the same path as typed input."""
        return self.send(transcript)

    async def dictate(self, capability: DictationCapability) -> bool:
        """Capture one utterance from ``capability`` and send it.

        Returns:
            True if a transcript was captured and accepted
        """
        if not capability.available:
            self._debug("warning", "Dictation is not available")
            return False
        transcript = await capability.listen()
        if not transcript:
            return False
        return self.accept_dictation(transcript)

    async def _respond(self, exchange: PendingExchange) -> None:
        try:
            reply = await self._generator.generate(exchange.user_message.text)
        except Exception as e:
            self._debug("error", f"Response failed: {e}")
            reply = APOLOGY_TEXT
        self._resolve(exchange, reply)

    def _resolve(self, exchange: PendingExchange, reply: str) -> None:
        """Replace the exchange's placeholder with the final reply."""
        if self._pending is not exchange:
            self._debug("debug", "Dropping reply for a discarded exchange")
            return
        self._pending = None

        index = self._index_of(exchange.placeholder)
        if index is None:
            self._debug("debug", "Dropping reply: placeholder no longer present")
            self._notify()
            return

        final = Message.from_assistant(reply)
        self._messages[index] = final
        self._persist()
        self._start_reveal(final)
        self._notify()

    def _index_of(self, message: Message) -> int | None:
        for index, candidate in enumerate(self._messages):
            if candidate is message:
                return index
        return None

    def clear(self) -> None:
        """Discard the conversation and schedule a fresh greeting.

        Safe to call at any time, including while a reply is in flight;
        that reply is cancelled and, should it still complete, dropped.
        """
        loop = asyncio.get_running_loop()

        if self._pending is not None:
            if self._pending.task is not None:
                self._pending.task.cancel()
            self._pending = None

        self._reveal.cancel_all()
        self._messages.clear()
        self._store.clear()
        self._cancel_greeting()
        self._greeting_task = loop.create_task(self._greet_after_clear())
        self._debug("info", "Chat cleared")
        self._notify()

    async def _greet_after_clear(self) -> None:
        await self._sleep(self._settings.clear_greeting_delay)
        if self._greeting_task is asyncio.current_task():
            self._greeting_task = None

        if self._messages:
            self._debug("debug", "Skipping greeting: conversation already resumed")
            return

        greeting = Message.from_assistant(CLEARED_TEXT)
        self._messages.append(greeting)
        self._persist()
        self._start_reveal(greeting)
        self._notify()

    def _cancel_greeting(self) -> None:
        if self._greeting_task is not None:
            if not self._greeting_task.done():
                self._greeting_task.cancel()
                self._debug("debug", "Scheduled greeting superseded")
            self._greeting_task = None

    async def wait_idle(self) -> None:
        """Wait for the in-flight reply and any scheduled greeting."""
        while True:
            tasks = [
                task for task in (
                    self._pending.task if self._pending else None,
                    self._greeting_task,
                )
                if task is not None and not task.done()
            ]
            if not tasks:
                return
            await asyncio.wait(tasks)

    async def wait_revealed(self) -> None:
        """Wait until every active reveal has finished."""
        for message_id in self._reveal.active_ids:
            await self._reveal.wait(message_id)

    async def close(self) -> None:
        """Cancel every outstanding task."""
        tasks = []
        if self._pending is not None and self._pending.task is not None:
            tasks.append(self._pending.task)
        if self._greeting_task is not None:
            tasks.append(self._greeting_task)
        for task in tasks:
            task.cancel()
        self._reveal.cancel_all()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def messages(self) -> tuple[Message, ...]:
        """Snapshot of the ordered message sequence."""
        return tuple(self._messages)

    @property
    def loading(self) -> bool:
        return self._pending is not None

    @property
    def state(self) -> SessionState:
        return SessionState.AWAITING if self._pending is not None else SessionState.IDLE

    @property
    def message_count(self) -> int:
        """Number of messages, excluding the placeholder."""
        return sum(1 for msg in self._messages if not msg.placeholder)

    def visible_text(self, message: Message) -> str:
        """Text the renderer should currently show for ``message``."""
        return self._reveal.visible_text(message)

    def is_revealing(self, message_id: str) -> bool:
        return self._reveal.is_revealing(message_id)

    @property
    def settings(self) -> SessionSettings:
        return self._settings

    @property
    def store(self) -> MessageHistoryStore:
        return self._store

    @property
    def generator(self) -> ResponseGenerator:
        return self._generator

    @property
    def reveal_engine(self) -> RevealEngine:
        return self._reveal
