"""Theme definitions for the TUI.

This module hides the design decisions about:
- Color palettes and visual appearance
- Dark/light mode switching

To add a new theme, define it here and register it in ``TextualThemeToggle``.
"""

from typing import TYPE_CHECKING

from textual.theme import Theme

from ..capabilities import ThemeToggle

if TYPE_CHECKING:
    from textual.app import App

# Violet night palette
BUDDY_DARK = Theme(
    name="buddy-dark",
    primary="#8b5cf6",      # Violet - main accent
    secondary="#c4b5fd",    # Lavender - assistant bubbles
    accent="#f0abfc",       # Orchid - highlights
    foreground="#e4e4f0",
    background="#0f0d1a",
    success="#34d399",      # Emerald - user bubbles
    warning="#fbbf24",
    error="#f87171",
    surface="#1a1729",
    panel="#15121f",
    dark=True,
    variables={
        "border": "#3b3552",
        "border-blurred": "#2a2540",
        "text-muted": "#8a84a3",
        "scrollbar": "#2a2540",
        "scrollbar-hover": "#3b3552",
        "scrollbar-active": "#8b5cf6",
        "scrollbar-background": "#15121f",
        "footer-key-foreground": "#f0abfc",
        "input-selection-background": "#8b5cf6 30%",
    },
)

# Daylight counterpart
BUDDY_LIGHT = Theme(
    name="buddy-light",
    primary="#7c3aed",
    secondary="#6d28d9",
    accent="#c026d3",
    foreground="#1f1b2e",
    background="#f7f5fc",
    success="#059669",
    warning="#d97706",
    error="#dc2626",
    surface="#ffffff",
    panel="#efebf8",
    dark=False,
    variables={
        "border": "#cfc8e3",
        "border-blurred": "#e2ddef",
        "text-muted": "#6b6585",
        "scrollbar": "#e2ddef",
        "scrollbar-hover": "#cfc8e3",
        "scrollbar-active": "#7c3aed",
        "scrollbar-background": "#efebf8",
        "footer-key-foreground": "#c026d3",
        "input-selection-background": "#7c3aed 25%",
    },
)


class TextualThemeToggle(ThemeToggle):
    """Flips a Textual app between the dark and light buddy themes."""

    def __init__(self, app: "App", dark: bool = True) -> None:
        self._app = app
        self._dark = dark

    def install(self) -> None:
        """Register both themes and apply the current one."""
        self._app.register_theme(BUDDY_DARK)
        self._app.register_theme(BUDDY_LIGHT)
        self._apply()

    def _apply(self) -> None:
        self._app.theme = BUDDY_DARK.name if self._dark else BUDDY_LIGHT.name

    @property
    def is_dark(self) -> bool:
        return self._dark

    def toggle(self) -> bool:
        self._dark = not self._dark
        self._apply()
        return self._dark
