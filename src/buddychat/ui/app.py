"""Main Textual TUI application.

Orchestrates the UI components and the session controller. The app plays
the renderer, theme toggle and input roles around the conversation core.
"""

import asyncio
import contextlib

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer, Header

from ..capabilities import DictationCapability
from ..config import LogLevel
from ..models import SessionSettings
from ..session import SessionController
from ..store import MessageHistoryStore
from .callbacks import TUICallback
from .styles import APP_CSS
from .themes import TextualThemeToggle
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, copy_text


class BuddyChatApp(App):
    """Textual TUI for the chat assistant."""

    CSS = APP_CSS
    TITLE = "AI Assistant"

    BINDINGS = [
        Binding("ctrl+c", "quit", "Quit"),
        Binding("ctrl+k", "clear_chat", "Clear Chat", priority=True),
        Binding("ctrl+t", "toggle_theme", "Theme"),
        Binding("ctrl+r", "copy_last_response", "Copy Response"),
        Binding("ctrl+g", "dictate", "Dictate"),
        Binding("ctrl+d", "toggle_debug", "Log", priority=True),
    ]

    def __init__(
        self,
        store: MessageHistoryStore,
        settings: SessionSettings | None = None,
        log_level: str | None = None,
        dictation: DictationCapability | None = None,
        dark: bool = True,
    ) -> None:
        super().__init__()
        self._store = store
        self._settings = settings or SessionSettings()
        self._log_level = log_level
        self._dictation = dictation
        self._theme_toggle = TextualThemeToggle(self, dark=dark)
        self.controller: SessionController | None = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield ChatHistoryWidget(id="chat-history")
        yield DebugPanel(id="debug-panel")
        yield ChatInputBar(id="chat-input-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self._theme_toggle.install()

        log_panel = self.query_one("#debug-panel", DebugPanel)
        if self._log_level is not None:
            log_panel.log_level = LogLevel.from_string(self._log_level)
            log_panel.show()
            log_panel.route("info", "TUI", f"Log panel enabled with level: {self._log_level.upper()}")

        callback = TUICallback(
            chat=self.query_one("#chat-history", ChatHistoryWidget),
            input_bar=self.query_one("#chat-input-bar", ChatInputBar),
            log_panel=log_panel,
            app=self,
        )
        # Created here so the greeting reveal ticks on the app's event loop.
        self.controller = SessionController(
            store=self._store,
            settings=self._settings,
            debug_callback=callback.handle_debug,
        )
        callback.attach(self.controller)
        self.query_one("#chat-input-bar", ChatInputBar).focus_input()

    async def on_unmount(self) -> None:
        """Cancel outstanding session tasks when the app exits."""
        if self.controller is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await self.controller.close()

    def on_chat_input_bar_submitted(self, event: ChatInputBar.Submitted) -> None:
        """Handle user input submission."""
        if self.controller is None:
            return
        self.controller.send(event.value)

    def action_clear_chat(self) -> None:
        """Clear the conversation."""
        if self.controller is None:
            return
        self.controller.clear()
        self.notify("Chat cleared", timeout=2)

    def action_toggle_theme(self) -> None:
        """Switch between dark and light themes."""
        dark = self._theme_toggle.toggle()
        self.notify(f"{'Dark' if dark else 'Light'} theme", timeout=2)

    def action_toggle_debug(self) -> None:
        """Toggle the log panel visibility."""
        log_panel = self.query_one("#debug-panel", DebugPanel)
        is_visible = log_panel.toggle()
        self.notify(f"Log panel {'shown' if is_visible else 'hidden'}", timeout=2)

    def action_copy_last_response(self) -> None:
        """Copy last assistant response to clipboard."""
        chat = self.query_one("#chat-history", ChatHistoryWidget)
        response = chat.get_last_response()
        if response:
            copy_text(chat, response, "Response")
        else:
            self.notify("No response to copy", severity="warning")

    def action_dictate(self) -> None:
        """Capture one dictated utterance and send it."""
        if self._dictation is None or not self._dictation.available:
            self.notify("Dictation is not available", severity="warning", timeout=2)
            return
        if self.controller is None or self.controller.loading:
            return
        self.run_worker(self.controller.dictate(self._dictation), exclusive=True, group="dictation")


async def run_textual_tui(
    store: MessageHistoryStore,
    settings: SessionSettings | None = None,
    log_level: str | None = None,
    dictation: DictationCapability | None = None,
) -> None:
    """Run the Textual TUI.

    Args:
        store: Persisted message history
        settings: Session timing settings
        log_level: Log level for panel (debug/info/warning/error), None to hide
        dictation: Optional dictation source bound to Ctrl+G
    """
    app = BuddyChatApp(
        store=store,
        settings=settings,
        log_level=log_level,
        dictation=dictation,
    )
    with contextlib.suppress(KeyboardInterrupt, asyncio.CancelledError):
        await app.run_async()
