"""Tests for the session controller lifecycle."""
import asyncio

import pytest

from buddychat.capabilities import DictationCapability, ScriptedDictation
from buddychat.config import APOLOGY_TEXT, CLEARED_TEXT, PLACEHOLDER_ID, STORAGE_KEY, WELCOME_TEXT
from buddychat.models import Author, Message, SessionState
from buddychat.session import SessionController
from buddychat.store import MessageHistoryStore
from buddychat.store.file import FileBackend
from buddychat.store.in_memory import InMemoryBackend


class NoMicrophone(DictationCapability):
    """Dictation source that is never available."""

    @property
    def available(self) -> bool:
        return False

    async def listen(self) -> str | None:
        raise AssertionError("listen must not be called when unavailable")


class ChangeRecorder:
    """Records the message sequence each time the controller notifies."""

    def __init__(self, controller: SessionController) -> None:
        self.controller = controller
        self.snapshots: list[tuple[Message, ...]] = []

    def __call__(self) -> None:
        self.snapshots.append(self.controller.messages)


def texts(controller: SessionController) -> list[str]:
    return [msg.text for msg in controller.messages]


@pytest.fixture
async def stubborn_controller(history_store, stubborn_generator, fast_settings, debug_recorder):
    """Controller whose generator finishes even after being cancelled."""
    session = SessionController(
        store=history_store,
        generator=stubborn_generator,
        settings=fast_settings,
        debug_callback=debug_recorder,
    )
    yield session
    await session.close()


class TestStartup:
    """Tests for restoring history or greeting on construction."""

    @pytest.mark.asyncio
    async def test_empty_store_greets(self, controller, history_store):
        """Test that a fresh session starts with the persisted welcome greeting."""
        [greeting] = controller.messages

        assert greeting.text == WELCOME_TEXT
        assert greeting.author == Author.ASSISTANT
        assert history_store.load() == [greeting]
        assert controller.state == SessionState.IDLE

    @pytest.mark.asyncio
    async def test_welcome_greeting_is_revealed(self, controller):
        """Test that the synthesized greeting types itself out."""
        [greeting] = controller.messages
        assert controller.is_revealing(greeting.id)

        await asyncio.wait_for(controller.wait_revealed(), timeout=5)

        assert controller.visible_text(greeting) == WELCOME_TEXT

    @pytest.mark.asyncio
    async def test_restores_saved_history(self, history_store, gated_generator, fast_settings):
        """Test that saved messages are restored in order and shown in full."""
        saved = [Message.from_user("hi"), Message.from_assistant("Hello again!")]
        history_store.save(saved)

        session = SessionController(store=history_store, generator=gated_generator, settings=fast_settings)
        try:
            assert list(session.messages) == saved
            assert session.visible_text(saved[1]) == "Hello again!"
            assert not session.is_revealing(saved[1].id)
            assert session.reveal_engine.active_ids == []
        finally:
            await session.close()

    @pytest.mark.asyncio
    async def test_corrupt_history_falls_back_to_greeting(self, fast_settings, gated_generator, debug_recorder):
        """Test that an unreadable snapshot yields a greeting and a warning."""
        store = MessageHistoryStore(InMemoryBackend({STORAGE_KEY: '[{"id": 1}]'}))

        session = SessionController(
            store=store,
            generator=gated_generator,
            settings=fast_settings,
            debug_callback=debug_recorder,
        )
        try:
            assert texts(session) == [WELCOME_TEXT]
            assert "warning" in debug_recorder.levels("Store")
        finally:
            await session.close()

    @pytest.mark.asyncio
    async def test_undecodable_history_file_falls_back_to_greeting(
        self, tmp_path, gated_generator, fast_settings, debug_recorder
    ):
        """Test that a snapshot file with invalid bytes does not block startup."""
        (tmp_path / f"{STORAGE_KEY}.json").write_bytes(b"\xff")
        store = MessageHistoryStore(FileBackend(tmp_path))

        session = SessionController(
            store=store,
            generator=gated_generator,
            settings=fast_settings,
            debug_callback=debug_recorder,
        )
        try:
            assert texts(session) == [WELCOME_TEXT]
            assert "warning" in debug_recorder.levels("Store")
            assert [m.text for m in store.load()] == [WELCOME_TEXT]
        finally:
            await session.close()

    def test_constructed_outside_event_loop(self, fast_settings):
        """Test that without a running loop the greeting is shown in full."""
        session = SessionController(settings=fast_settings)
        [greeting] = session.messages

        assert session.visible_text(greeting) == WELCOME_TEXT
        assert not session.is_revealing(greeting.id)


class TestSend:
    """Tests for sending messages and receiving replies."""

    @pytest.mark.asyncio
    async def test_send_appends_user_and_placeholder(self, controller):
        """Test that a send appends the user message and the placeholder together."""
        assert controller.send("Hello") is True

        _, user, placeholder = controller.messages
        assert user.text == "Hello"
        assert user.author == Author.USER
        assert placeholder.placeholder
        assert placeholder.id == PLACEHOLDER_ID
        assert controller.loading
        assert controller.state == SessionState.AWAITING
        assert controller.message_count == 2

    @pytest.mark.asyncio
    async def test_text_is_trimmed(self, controller):
        controller.send("   spaced out  ")
        assert controller.messages[1].text == "spaced out"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_input_ignored(self, controller, text):
        """Test that blank input changes nothing."""
        before = controller.messages

        assert controller.send(text) is False
        assert controller.messages == before
        assert not controller.loading

    @pytest.mark.asyncio
    async def test_single_request_in_flight(self, controller, gated_generator):
        """Test that a second send is rejected while awaiting a reply."""
        controller.send("first")
        assert controller.send("second") is False
        await asyncio.sleep(0)

        assert gated_generator.calls == ["first"]
        assert len(controller.messages) == 3

    @pytest.mark.asyncio
    async def test_user_message_persisted_before_reply(self, controller, history_store):
        """Test that the user message is saved immediately, without the placeholder."""
        controller.send("remember this")

        stored = history_store.load()

        assert [m.text for m in stored] == [WELCOME_TEXT, "remember this"]
        assert not any(m.placeholder for m in stored)

    @pytest.mark.asyncio
    async def test_reply_replaces_placeholder_in_place(self, controller, gated_generator, history_store):
        """Test that the reply takes the placeholder's position and is persisted."""
        controller.send("Hello")
        gated_generator.gate.set()
        await controller.wait_idle()

        _, user, reply = controller.messages
        assert reply.text == "Gated reply."
        assert reply.author == Author.ASSISTANT
        assert not reply.placeholder
        assert reply.id != PLACEHOLDER_ID
        assert not controller.loading
        assert history_store.load() == list(controller.messages)

    @pytest.mark.asyncio
    async def test_reply_is_revealed(self, controller, gated_generator):
        """Test that the final reply is revealed to completion."""
        controller.send("Hello")
        gated_generator.gate.set()
        await controller.wait_idle()
        reply = controller.messages[-1]

        assert reply.text.startswith(controller.visible_text(reply))
        await asyncio.wait_for(controller.wait_revealed(), timeout=5)
        assert controller.visible_text(reply) == reply.text

    @pytest.mark.asyncio
    async def test_failure_becomes_apology(self, controller, gated_generator, debug_recorder):
        """Test that a generator failure resolves to the apology message."""
        gated_generator.fail = True
        controller.send("Hello")
        gated_generator.gate.set()
        await controller.wait_idle()

        reply = controller.messages[-1]
        assert reply.text == APOLOGY_TEXT
        assert not reply.placeholder
        assert not controller.loading
        assert "error" in debug_recorder.levels("Session")

    @pytest.mark.asyncio
    async def test_can_send_again_after_reply(self, controller, gated_generator):
        controller.send("one")
        gated_generator.gate.set()
        await controller.wait_idle()

        assert controller.send("two") is True
        await controller.wait_idle()

        assert texts(controller)[1:] == ["one", "Gated reply.", "two", "Gated reply."]

    @pytest.mark.asyncio
    async def test_write_failures_do_not_interrupt(self, gated_generator, fast_settings, debug_recorder):
        """Test that the conversation continues when saving fails."""
        store = MessageHistoryStore(InMemoryBackend(fail_writes=True))
        session = SessionController(
            store=store,
            generator=gated_generator,
            settings=fast_settings,
            debug_callback=debug_recorder,
        )
        try:
            session.send("Hello")
            gated_generator.gate.set()
            await session.wait_idle()

            assert texts(session) == [WELCOME_TEXT, "Hello", "Gated reply."]
            assert "error" in debug_recorder.levels("Store")
        finally:
            await session.close()

    @pytest.mark.asyncio
    async def test_simulated_reply_in_response_space(self, history_store, fast_settings):
        """Test a full exchange against the default simulated generator."""
        session = SessionController(store=history_store, settings=fast_settings)
        try:
            session.send("What's the weather like?")
            await asyncio.wait_for(session.wait_idle(), timeout=5)

            assert session.messages[-1].text in session.generator.response_space
        finally:
            await session.close()


class TestClear:
    """Tests for clearing the conversation."""

    @pytest.mark.asyncio
    async def test_clear_empties_and_removes_snapshot(self, controller, memory_backend):
        """Test that clear empties the sequence and the stored key."""
        controller.send("Hello")
        controller.clear()

        assert controller.messages == ()
        assert memory_backend.get(STORAGE_KEY) is None
        assert not controller.loading

    @pytest.mark.asyncio
    async def test_greeting_after_delay(self, controller, history_store):
        """Test that the cleared greeting appears after the delay and is persisted."""
        controller.clear()
        await controller.wait_idle()

        assert texts(controller) == [CLEARED_TEXT]
        assert [m.text for m in history_store.load()] == [CLEARED_TEXT]

    @pytest.mark.asyncio
    async def test_clear_twice_schedules_one_greeting(self, controller):
        controller.clear()
        controller.clear()
        await controller.wait_idle()

        assert texts(controller) == [CLEARED_TEXT]

    @pytest.mark.asyncio
    async def test_in_flight_reply_discarded(self, controller, gated_generator, fast_settings):
        """Test that clearing during a request drops its reply."""
        controller.send("Hello")
        await asyncio.sleep(0)
        controller.clear()
        gated_generator.gate.set()
        await controller.wait_idle()
        await asyncio.sleep(fast_settings.clear_greeting_delay)

        assert texts(controller) == [CLEARED_TEXT]

    @pytest.mark.asyncio
    async def test_send_supersedes_greeting(self, controller, gated_generator, fast_settings):
        """Test that sending right after clear cancels the scheduled greeting."""
        controller.clear()
        controller.send("What's the weather like?")

        user, placeholder = controller.messages
        assert user.text == "What's the weather like?"
        assert placeholder.placeholder

        gated_generator.gate.set()
        await controller.wait_idle()
        await asyncio.sleep(fast_settings.clear_greeting_delay * 3)

        assert texts(controller) == ["What's the weather like?", "Gated reply."]

    @pytest.mark.asyncio
    async def test_weather_scenario_with_simulated_generator(self, history_store, fast_settings):
        """Test clear then immediate send with the default generator."""
        session = SessionController(store=history_store, settings=fast_settings)
        try:
            session.clear()
            session.send("What's the weather like?")
            assert [m.placeholder for m in session.messages] == [False, True]

            await asyncio.wait_for(session.wait_idle(), timeout=5)

            user, reply = session.messages
            assert user.text == "What's the weather like?"
            assert reply.text in session.generator.response_space
        finally:
            await session.close()

    @pytest.mark.asyncio
    async def test_clear_mid_reveal_stops_frames(self, controller, gated_generator, fast_settings):
        """Test that a reply being revealed emits nothing after clear."""
        frames: list[tuple[str, str]] = []
        controller.set_reveal_callback(lambda mid, text: frames.append((mid, text)))
        gated_generator.reply = "A fairly long reply. " * 20

        controller.send("Hello")
        gated_generator.gate.set()
        await controller.wait_idle()
        reply = controller.messages[-1]
        while not any(mid == reply.id for mid, _ in frames):
            await asyncio.sleep(fast_settings.tick_interval)
        assert controller.is_revealing(reply.id)

        controller.clear()
        emitted = sum(1 for mid, _ in frames if mid == reply.id)
        await asyncio.sleep(fast_settings.tick_interval * 20)

        assert sum(1 for mid, _ in frames if mid == reply.id) == emitted
        assert controller.reveal_engine.revealed_length(reply.id) is None
        assert reply.id not in controller.reveal_engine.active_ids


class TestStaleCompletion:
    """Tests for replies that complete after their exchange was discarded."""

    @pytest.mark.asyncio
    async def test_reply_after_clear_is_dropped(self, stubborn_controller, debug_recorder):
        """Test that a reply completing after clear never reaches the sequence."""
        stubborn_controller.send("first")
        await asyncio.sleep(0)
        stale_task = stubborn_controller._pending.task

        stubborn_controller.clear()
        await asyncio.wait({stale_task})

        assert stale_task.result() is None
        assert stubborn_controller.messages == ()
        assert any("discarded exchange" in msg for _, _, msg in debug_recorder.entries)

    @pytest.mark.asyncio
    async def test_stale_reply_does_not_fill_new_placeholder(self, stubborn_controller):
        """Test that an old reply cannot resolve a newer exchange's placeholder."""
        generator = stubborn_controller.generator
        stubborn_controller.send("first")
        await asyncio.sleep(0)
        stale_task = stubborn_controller._pending.task

        stubborn_controller.clear()
        stubborn_controller.send("second")
        await asyncio.wait({stale_task})

        user, placeholder = stubborn_controller.messages
        assert user.text == "second"
        assert placeholder.placeholder
        assert stubborn_controller.loading

        generator.gate.set()
        await stubborn_controller.wait_idle()

        assert texts(stubborn_controller) == ["second", "Gated reply."]
        assert "stale reply" not in texts(stubborn_controller)

    @pytest.mark.asyncio
    async def test_ids_stay_unique_throughout(self, stubborn_controller):
        """Test that no observed sequence ever holds duplicate ids."""
        recorder = ChangeRecorder(stubborn_controller)
        stubborn_controller.set_change_callback(recorder)
        generator = stubborn_controller.generator

        stubborn_controller.send("first")
        await asyncio.sleep(0)
        stubborn_controller.clear()
        stubborn_controller.send("second")
        generator.gate.set()
        await stubborn_controller.wait_idle()
        stubborn_controller.send("third")
        await stubborn_controller.wait_idle()

        assert recorder.snapshots
        for snapshot in recorder.snapshots:
            ids = [m.id for m in snapshot]
            assert len(ids) == len(set(ids))
            assert sum(m.placeholder for m in snapshot) <= 1


class TestDictation:
    """Tests for dictated input."""

    @pytest.mark.asyncio
    async def test_dictated_text_sent_like_typed(self, controller, gated_generator):
        """Test that a transcript follows the typed-input path."""
        dictation = ScriptedDictation(["  Tell me a joke  "])

        assert await controller.dictate(dictation) is True
        assert controller.messages[1].text == "Tell me a joke"
        assert controller.messages[2].placeholder
        assert dictation.remaining == 0

    @pytest.mark.asyncio
    async def test_unavailable_dictation(self, controller, debug_recorder):
        assert await controller.dictate(NoMicrophone()) is False
        assert "warning" in debug_recorder.levels("Session")
        assert len(controller.messages) == 1

    @pytest.mark.asyncio
    async def test_nothing_recognized(self, controller):
        assert await controller.dictate(ScriptedDictation()) is False
        assert not controller.loading

    @pytest.mark.asyncio
    async def test_accept_dictation_respects_in_flight_rule(self, controller):
        controller.send("typed")
        assert controller.accept_dictation("spoken") is False


class TestClose:
    """Tests for shutting a controller down."""

    @pytest.mark.asyncio
    async def test_close_cancels_outstanding_work(self, controller, gated_generator):
        """Test that close cancels the in-flight reply and the reveal."""
        controller.send("Hello")
        await asyncio.sleep(0)
        task = controller._pending.task

        await controller.close()

        assert task.cancelled()
        assert controller.reveal_engine.active_ids == []

    @pytest.mark.asyncio
    async def test_change_callback_fires(self, controller, gated_generator):
        """Test that observers hear about sends and replies."""
        recorder = ChangeRecorder(controller)
        controller.set_change_callback(recorder)

        controller.send("Hello")
        gated_generator.gate.set()
        await controller.wait_idle()

        assert [len(s) for s in recorder.snapshots] == [3, 3]
        assert recorder.snapshots[0][-1].placeholder
        assert not recorder.snapshots[-1][-1].placeholder
