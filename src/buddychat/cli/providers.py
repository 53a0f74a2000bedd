"""Provider factory functions for CLI.

Centralizes creation of the message store and session settings from
environment variables. Hides configuration details from command
implementations.
"""

import os

from rich.console import Console
from rich.markup import escape

from ..config import DEFAULT_DATA_DIR, LogLevel
from ..models import SessionSettings
from ..store import MessageHistoryStore, create_backend

# Default console for output
_console = Console()


def get_store(console: Console | None = None) -> MessageHistoryStore:
    """Create the persisted message store from environment variables.

    Args:
        console: Optional Rich console for output

    Returns:
        Message history store

    Raises:
        SystemExit: If BUDDYCHAT_STORE names an unknown backend

    Environment variables:
        BUDDYCHAT_STORE: Backend type (file or memory; default: file)
        BUDDYCHAT_DATA_DIR: Directory for the file backend (default: ~/.buddychat)
    """
    import typer

    con = console or _console
    backend_name = os.getenv("BUDDYCHAT_STORE", "file").lower()

    config = {}
    if backend_name == "file":
        config["path"] = os.getenv("BUDDYCHAT_DATA_DIR", DEFAULT_DATA_DIR)

    try:
        backend = create_backend(backend_name, **config)
    except ValueError as e:
        con.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    return MessageHistoryStore(backend)


def get_settings(console: Console | None = None) -> SessionSettings:
    """Create session settings from environment variables.

    Environment variables:
        BUDDYCHAT_SEED: Integer seed for reproducible replies (optional)
    """
    import typer

    con = console or _console
    seed_str = os.getenv("BUDDYCHAT_SEED")
    if not seed_str:
        return SessionSettings()

    try:
        return SessionSettings(seed=int(seed_str))
    except ValueError:
        con.print(f"[red]Error: BUDDYCHAT_SEED must be an integer, got {seed_str!r}[/red]")
        raise typer.Exit(code=1)


def console_debug_callback(console: Console, log_level: str):
    """Build a debug callback printing diagnostics at or above ``log_level``."""
    threshold = LogLevel.from_string(log_level)
    colors = {"debug": "dim", "info": "cyan", "warning": "yellow", "error": "red"}

    def _debug(level: str, component: str, message: str) -> None:
        if LogLevel.from_string(level) < threshold:
            return
        color = colors.get(level, "white")
        console.print(f"[{color}]\\[{component}] {escape(message)}[/{color}]", highlight=False)

    return _debug
