"""Callback bridge between the session controller and the widgets.

Hides the details of how the TUI receives updates from the session.
The controller runs on Textual's own event loop, so callbacks update
widgets directly.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from textual.app import App

    from ..session import SessionController
    from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel


class TUICallback:
    """Routes session changes, reveal frames and diagnostics to widgets."""

    def __init__(
        self,
        chat: "ChatHistoryWidget",
        input_bar: "ChatInputBar",
        log_panel: "DebugPanel",
        app: "App | None" = None,
    ) -> None:
        self.chat = chat
        self.input_bar = input_bar
        self.log_panel = log_panel
        self.app = app
        self._controller: "SessionController | None" = None

    def attach(self, controller: "SessionController") -> None:
        """Subscribe to ``controller`` and render its current state."""
        self._controller = controller
        controller.set_change_callback(self.handle_change)
        controller.set_reveal_callback(self.handle_reveal)
        self.handle_change()

    def handle_change(self) -> None:
        """Re-render after a change to the message sequence or loading flag."""
        controller = self._controller
        if controller is None:
            return
        self.chat.sync(controller.messages, controller.visible_text, controller.is_revealing)
        self.chat.border_subtitle = f"{controller.message_count} messages"
        self.input_bar.set_loading(controller.loading)
        if self.app is not None:
            self.app.sub_title = f"Always here to help • {controller.message_count} messages"

    def handle_reveal(self, message_id: str, visible_text: str) -> None:
        """Show one reveal frame."""
        controller = self._controller
        revealing = controller.is_revealing(message_id) if controller else False
        self.chat.show_reveal(message_id, visible_text, revealing)

    def handle_debug(self, level: str, component: str, message: str) -> None:
        """Route a diagnostic to the log panel."""
        self.log_panel.route(level, component, message)
