"""Configuration constants.

Centralizes magic numbers and fixed texts for the conversation core.
"""


class LogLevel:
    """Log level constants with numeric values for comparison.

    Standard logging hierarchy: DEBUG < INFO < WARNING < ERROR
    Lower numeric value = more verbose (shows more messages).
    """

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40

    _names = {
        DEBUG: "DEBUG",
        INFO: "INFO",
        WARNING: "WARNING",
        ERROR: "ERROR",
    }

    _from_string = {
        "debug": DEBUG,
        "info": INFO,
        "warning": WARNING,
        "error": ERROR,
    }

    @classmethod
    def name(cls, level: int) -> str:
        """Get the name for a log level."""
        return cls._names.get(level, "UNKNOWN")

    @classmethod
    def from_string(cls, level_str: str) -> int:
        """Convert string to log level. Returns DEBUG if invalid."""
        return cls._from_string.get(level_str.lower(), cls.DEBUG)


# Persistence
STORAGE_KEY = "chatbot-messages"  # Key the message snapshot is stored under
DEFAULT_DATA_DIR = "~/.buddychat"

# Placeholder for the in-flight assistant reply
PLACEHOLDER_ID = "typing"

# Timing (seconds)
REVEAL_TICK_INTERVAL = 0.03  # One character per tick
CLEAR_GREETING_DELAY = 0.5  # Delay before the post-clear greeting appears
RESPONSE_DELAY_MIN = 1.0
RESPONSE_DELAY_MAX = 3.0

# Fixed assistant texts
WELCOME_TEXT = (
    "Hey there! I'm your AI buddy. Ask me anything! I can help you with questions, "
    "have conversations, or just chat about whatever's on your mind. \U0001f916✨"
)
CLEARED_TEXT = (
    "Chat cleared! I'm ready for our new conversation. "
    "What would you like to talk about?"
)
APOLOGY_TEXT = (
    "I'm sorry, I'm having trouble responding right now. "
    "Please try again in a moment."
)

# Input bar
INPUT_HISTORY_MAX_SIZE = 100  # Maximum entries in input history
INPUT_PLACEHOLDER = "Type your message..."
INPUT_PLACEHOLDER_LOADING = "AI is thinking..."
