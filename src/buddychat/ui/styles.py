"""CSS styles for the TUI.

Hides layout and styling decisions from the application logic.
Uses Textual CSS features: nesting, pseudo-classes, variables.
"""

APP_CSS = """
/* ============================================
   Main Screen Layout - single column
   ============================================ */
Screen {
    layout: vertical;
    background: $background;
}

/* ============================================
   Chat History Panel
   ============================================ */
#chat-history {
    height: 1fr;
    background: $panel;
    border: round $primary 60%;
    border-title-color: $primary;
    border-title-style: bold;
    border-title-align: left;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    scrollbar-gutter: stable;

    &:focus-within {
        border: round $primary;
    }
}

.empty-hint {
    width: 100%;
    height: 100%;
    content-align: center middle;
    color: $text-muted;
}

/* ============================================
   Chat Messages
   ============================================ */
.chat-message {
    width: 100%;
    height: auto;
    margin: 0 0 1 0;
    padding: 0 2;
}

/* User messages - right-leaning, green accent */
.user-message {
    border-right: tall $success;
    background: $success 8%;
    margin-left: 8;

    & .message-header {
        color: $success;
        text-style: bold;
        text-align: right;
    }

    & .message-timestamp {
        text-align: right;
    }
}

/* Assistant messages - left-leaning, violet accent */
.assistant-message {
    border-left: tall $secondary;
    background: $secondary 8%;
    margin-right: 8;

    & .message-header {
        color: $secondary;
        text-style: bold;
    }
}

.placeholder-message .message-content {
    color: $text-muted;
    text-style: italic;
}

.message-header {
    height: auto;
}

.message-content {
    height: auto;
    color: $foreground;
}

.message-timestamp {
    height: auto;
    color: $text-muted;
}

/* ============================================
   Debug/Log Panel
   ============================================ */
#debug-panel {
    height: auto;
    min-height: 6;
    max-height: 12;
    background: $panel;
    border: round $warning 60%;
    border-title-color: $warning;
    border-title-style: bold;
    border-subtitle-color: $text-muted;
    border-subtitle-align: right;
    padding: 0 1;
    overflow-y: scroll;
}

/* ============================================
   Chat Input Bar - Text Entry + Send
   ============================================ */
ChatInputBar {
    height: 5;
    border: round $primary 60%;
    background: $panel;

    &:focus-within {
        border: round $primary;
    }

    &.-loading {
        border: round $warning 60%;
    }
}

#chat-input {
    width: 1fr;
    height: 100%;
    border: none;
    padding: 0 1;
    background: transparent;
}

#send-btn {
    width: 10;
    height: 100%;
    margin: 0 0 0 1;
    border: tall $primary;
    background: $primary;
    color: $background;
    text-style: bold;

    &:hover {
        background: $primary-lighten-1;
    }

    &:disabled {
        background: $surface;
        color: $text-muted;
        border: tall $border;
    }
}

/* ============================================
   Header / Footer
   ============================================ */
Header {
    background: $panel;
    color: $foreground;
    dock: top;
    height: 1;
}

HeaderTitle {
    color: $primary;
    text-style: bold;
}

Footer {
    background: $panel;
}
"""
