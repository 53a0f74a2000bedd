"""Pytest configuration and shared fixtures."""
import asyncio

import pytest

from buddychat.models import SessionSettings
from buddychat.responder import ResponseGenerationError, ResponseGenerator
from buddychat.session import SessionController
from buddychat.store import MessageHistoryStore, create_backend


class GatedGenerator(ResponseGenerator):
    """Generator whose replies are released by the test.

    ``generate`` waits on ``gate``; set ``fail`` to raise instead of replying.
    With ``ignore_cancel`` the call swallows cancellation and still returns,
    standing in for a backend that completes no matter what.
    """

    def __init__(self, reply: str = "Gated reply.", ignore_cancel: bool = False) -> None:
        super().__init__()
        self.reply = reply
        self.ignore_cancel = ignore_cancel
        self.gate = asyncio.Event()
        self.calls: list[str] = []
        self.fail = False

    async def generate(self, user_text: str) -> str:
        self.calls.append(user_text)
        try:
            await self.gate.wait()
        except asyncio.CancelledError:
            if not self.ignore_cancel:
                raise
            return "stale reply"
        if self.fail:
            raise ResponseGenerationError("backend unavailable")
        return self.reply


class DebugRecorder:
    """Collects (level, component, message) diagnostics."""

    def __init__(self) -> None:
        self.entries: list[tuple[str, str, str]] = []

    def __call__(self, level: str, component: str, message: str) -> None:
        self.entries.append((level, component, message))

    def levels(self, component: str | None = None) -> list[str]:
        return [lvl for lvl, comp, _ in self.entries if component is None or comp == component]


@pytest.fixture
def fast_settings():
    """Session settings with tiny delays so tests run quickly."""
    return SessionSettings(
        tick_interval=0.001,
        clear_greeting_delay=0.01,
        delay_min=0.005,
        delay_max=0.01,
        seed=1234,
    )


@pytest.fixture
def memory_backend():
    """Return an empty in-memory key-value backend."""
    return create_backend("memory")


@pytest.fixture
def history_store(memory_backend):
    """Return a message store over the in-memory backend."""
    return MessageHistoryStore(memory_backend)


@pytest.fixture
def debug_recorder():
    """Return a debug callback that records every diagnostic."""
    return DebugRecorder()


@pytest.fixture
def gated_generator():
    """Return a generator released by the test."""
    return GatedGenerator()


@pytest.fixture
def stubborn_generator():
    """Return a gated generator that completes even when cancelled."""
    return GatedGenerator(ignore_cancel=True)


@pytest.fixture
async def controller(history_store, gated_generator, fast_settings, debug_recorder):
    """Session controller driven by the gated generator.

    Closed after the test so no timer outlives it.
    """
    session = SessionController(
        store=history_store,
        generator=gated_generator,
        settings=fast_settings,
        debug_callback=debug_recorder,
    )
    yield session
    await session.close()
