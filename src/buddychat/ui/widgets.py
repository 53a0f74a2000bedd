"""Custom Textual widgets for the TUI.

Hides widget implementation details:
- Chat message rendering and live reveal updates
- Input history management and the loading state
- Log rendering and level filtering
"""

from collections.abc import Callable, Sequence
from datetime import datetime

from rich.text import Text
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.events import Click
from textual.message import Message as TextualMessage
from textual.widget import Widget
from textual.widgets import Button, RichLog, Static, TextArea

from ..config import INPUT_HISTORY_MAX_SIZE, INPUT_PLACEHOLDER, INPUT_PLACEHOLDER_LOADING, LogLevel
from ..models import Message
from .formatting import format_time

REVEAL_CURSOR = "▌"
THINKING_TEXT = "● ● ●  thinking"


def copy_text(widget: Widget, text: str, what: str) -> None:
    """Copy ``text`` to the system clipboard, falling back to OSC 52."""
    try:
        import pyperclip
        pyperclip.copy(text)
        widget.app.notify(f"{what} copied", timeout=2)
    except Exception:
        widget.app.copy_to_clipboard(text)
        widget.app.notify(f"{what} copied (terminal)", timeout=2)


class MessageBubble(Vertical):
    """One rendered chat message. Clicking it copies the full text."""

    def __init__(self, message: Message, visible_text: str, revealing: bool) -> None:
        if message.is_user:
            role_class = "user-message"
        else:
            role_class = "assistant-message"
        classes = f"chat-message {role_class}"
        if message.placeholder:
            classes += " placeholder-message"
        super().__init__(classes=classes)
        self.message = message
        self._content = Static(
            self._render_body(visible_text, revealing),
            classes="message-content",
            markup=False,
        )

    def compose(self):
        prefix = "You" if self.message.is_user else "Assistant"
        yield Static(prefix, classes="message-header", markup=False)
        yield self._content
        yield Static(format_time(self.message.timestamp), classes="message-timestamp")

    def _render_body(self, visible_text: str, revealing: bool) -> str:
        if self.message.placeholder:
            return THINKING_TEXT
        if revealing:
            return visible_text + REVEAL_CURSOR
        return visible_text

    def show(self, visible_text: str, revealing: bool) -> None:
        """Update the displayed (possibly partial) text."""
        self._content.update(self._render_body(visible_text, revealing))

    def on_click(self, event: Click) -> None:
        event.stop()
        if not self.message.placeholder:
            copy_text(self, self.message.text, "Message")


class ChatHistoryWidget(VerticalScroll):
    """Scrollable chat history mirroring the session's message sequence."""

    BORDER_TITLE = "Chat"
    BORDER_SUBTITLE = "Conversation history"
    ALLOW_SELECT = True

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._bubbles: dict[str, MessageBubble] = {}
        self._order: list[tuple[str, bool]] = []

    def sync(
        self,
        messages: Sequence[Message],
        visible_text: Callable[[Message], str],
        is_revealing: Callable[[str], bool],
    ) -> None:
        """Re-render to match ``messages``.

        Bubbles are rebuilt only when the sequence's shape changes; otherwise
        the existing bubbles are refreshed in place.
        """
        order = [(msg.id, msg.placeholder) for msg in messages]
        if order == self._order:
            for msg in messages:
                self._bubbles[msg.id].show(visible_text(msg), is_revealing(msg.id))
            return

        self.remove_children()
        self._bubbles.clear()
        self._order = order

        if not messages:
            self.mount(Static(
                "Start a conversation\nType a message below to get started!",
                classes="empty-hint",
            ))
            return

        for msg in messages:
            bubble = MessageBubble(msg, visible_text(msg), is_revealing(msg.id))
            self._bubbles[msg.id] = bubble
            self.mount(bubble)
        self.scroll_end(animate=False)

    def show_reveal(self, message_id: str, text: str, revealing: bool) -> None:
        """Apply one reveal frame."""
        bubble = self._bubbles.get(message_id)
        if bubble is None:
            return
        bubble.show(text, revealing)
        self.scroll_end(animate=False)

    def get_last_response(self) -> str | None:
        """Get the last finalized assistant response."""
        for bubble in reversed(list(self._bubbles.values())):
            msg = bubble.message
            if not msg.is_user and not msg.placeholder:
                return msg.text
        return None


class ChatInputBar(Horizontal):
    """Chat input bar with TextArea and Send button."""

    class Submitted(TextualMessage):
        """Message sent when user submits input."""

        def __init__(self, value: str) -> None:
            super().__init__()
            self.value = value

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._history: list[str] = []
        self._history_index: int = -1
        self._loading = False

    def compose(self):
        text_area = TextArea(id="chat-input", show_line_numbers=False)
        text_area.cursor_blink = False
        text_area.placeholder = INPUT_PLACEHOLDER
        yield text_area
        yield Button("Send", id="send-btn", variant="primary").with_tooltip(
            "Send message (Ctrl+J)"
        )

    def on_mount(self) -> None:
        text_area = self.query_one("#chat-input", TextArea)
        text_area.focus()
        text_area.highlight_cursor_line = False

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-btn":
            self._submit()

    def on_key(self, event) -> None:
        """Handle keyboard shortcuts.

        Note: ctrl+enter cannot work in terminals (terminal doesn't pass
        ctrl/shift modifiers with Enter). Use ctrl+j as the submit shortcut.
        """
        if event.key == "ctrl+j":
            self._submit()
            event.prevent_default()
            event.stop()
        elif event.key == "up" and self._is_cursor_at_start():
            self._navigate_history(-1)
            event.prevent_default()
            event.stop()
        elif event.key == "down" and self._is_cursor_at_end():
            self._navigate_history(1)
            event.prevent_default()
            event.stop()

    def _is_cursor_at_start(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        return text_area.cursor_location == (0, 0)

    def _is_cursor_at_end(self) -> bool:
        text_area = self.query_one("#chat-input", TextArea)
        lines = text_area.text.split("\n")
        return text_area.cursor_location == (len(lines) - 1, len(lines[-1]))

    def _navigate_history(self, direction: int) -> None:
        if not self._history:
            return
        text_area = self.query_one("#chat-input", TextArea)
        if direction < 0:
            if self._history_index == -1:
                self._history_index = len(self._history) - 1
            elif self._history_index > 0:
                self._history_index -= 1
        else:
            if self._history_index < len(self._history) - 1:
                self._history_index += 1
            else:
                self._history_index = -1
                text_area.text = ""
                return
        text_area.text = self._history[self._history_index]

    def _submit(self) -> None:
        if self._loading:
            return
        text_area = self.query_one("#chat-input", TextArea)
        value = text_area.text.strip()
        if not value:
            return
        if not self._history or self._history[-1] != value:
            self._history.append(value)
            del self._history[:-INPUT_HISTORY_MAX_SIZE]
        self._history_index = -1
        text_area.text = ""
        self.post_message(self.Submitted(value))

    def set_loading(self, loading: bool) -> None:
        """Disable sending while a reply is in flight."""
        self._loading = loading
        self.set_class(loading, "-loading")
        self.query_one("#send-btn", Button).disabled = loading
        self.query_one("#chat-input", TextArea).placeholder = (
            INPUT_PLACEHOLDER_LOADING if loading else INPUT_PLACEHOLDER
        )

    def focus_input(self) -> None:
        """Focus the text input."""
        self.query_one("#chat-input", TextArea).focus()


class DebugPanel(RichLog):
    """Log panel for session diagnostics with level filtering.

    Shows timestamped messages from the session, store, responder and reveal
    engine. Hidden by default, shown with --log-level or toggled with Ctrl+D.
    """

    BORDER_TITLE = "Log"
    BORDER_SUBTITLE = "Diagnostics"

    COMPONENT_COLORS = {
        "TUI": "cyan",
        "Session": "green",
        "Store": "bright_green",
        "Responder": "magenta",
        "Reveal": "bright_blue",
    }

    LEVEL_COLORS = {
        LogLevel.DEBUG: "dim white",
        LogLevel.INFO: "cyan",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    def __init__(self, *args, log_level: int = LogLevel.DEBUG, **kwargs) -> None:
        super().__init__(
            *args,
            markup=True,
            highlight=False,
            auto_scroll=True,
            wrap=True,
            **kwargs
        )
        self._log_level = log_level

    @property
    def log_level(self) -> int:
        """Current log level threshold."""
        return self._log_level

    @log_level.setter
    def log_level(self, level: int) -> None:
        self._log_level = level
        self._update_subtitle()

    def _update_subtitle(self) -> None:
        if self.display:
            self.border_subtitle = f"Level: {LogLevel.name(self._log_level)}"
        else:
            self.border_subtitle = "Hidden"

    def on_mount(self) -> None:
        """Hide by default."""
        self.display = False

    def log_entry(self, component: str, message: str, level: int = LogLevel.DEBUG) -> None:
        """Add a log entry if it meets the current level threshold."""
        if level < self._log_level:
            return

        timestamp = datetime.now().strftime("%H:%M:%S")
        level_color = self.LEVEL_COLORS.get(level, "white")
        comp_color = self.COMPONENT_COLORS.get(component, "white")

        line = Text.from_markup(
            f"[dim]{timestamp}[/] "
            f"[{level_color}]{LogLevel.name(level):<7}[/] "
            f"[{comp_color}]\\[{component}][/] "
        )
        line.append(message)
        self.write(line)

    def route(self, level: str, component: str, message: str) -> None:
        """Debug-callback entry point: Callable(level, component, message)."""
        self.log_entry(component, message, LogLevel.from_string(level))

    def show(self) -> None:
        self.display = True
        self._update_subtitle()

    def hide(self) -> None:
        self.display = False
        self.border_subtitle = "Hidden"

    def toggle(self) -> bool:
        """Toggle visibility. Returns new state."""
        if self.display:
            self.hide()
            return False
        self.show()
        return True
