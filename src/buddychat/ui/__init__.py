"""Terminal UI module for buddychat.

Provides a Textual-based TUI around the session controller.

Module structure (each module hides a design decision):
- widgets.py: Custom widgets (message bubbles, input bar, log panel)
- formatting.py: Timestamp display
- styles.py: CSS styling (layout decisions)
- themes.py: Color palettes and the dark/light toggle
- callbacks.py: Session integration (how the TUI receives updates)
- app.py: Application orchestration (user interaction flow)
"""

from .app import BuddyChatApp, run_textual_tui
from .callbacks import TUICallback
from .themes import TextualThemeToggle
from .widgets import ChatHistoryWidget, ChatInputBar, DebugPanel, MessageBubble

__all__ = [
    "BuddyChatApp",
    "ChatHistoryWidget",
    "ChatInputBar",
    "DebugPanel",
    "MessageBubble",
    "TUICallback",
    "TextualThemeToggle",
    "run_textual_tui",
]
