"""Main CLI application using Typer."""
import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..capabilities import ScriptedDictation
from ..models import Message
from ..session import SessionController
from ..ui.formatting import format_time
from .providers import console_debug_callback, get_settings, get_store

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="buddychat",
    help="Chat with a friendly simulated assistant",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

LOG_LEVEL_HELP = "Show diagnostics at this level (debug, info, warning, error)"


class RevealPrinter:
    """Prints assistant text to the console as it is revealed."""

    def __init__(self, out: Console) -> None:
        self._out = out
        self._printed: dict[str, int] = {}

    def on_frame(self, message_id: str, visible_text: str) -> None:
        done = self._printed.get(message_id)
        if done is None:
            self._out.print("[bold green]Assistant:[/bold green] ", end="")
            done = 0
        self._out.print(Text(visible_text[done:]), end="")
        self._printed[message_id] = len(visible_text)

    def finish(self) -> None:
        """End the current line after a reveal completes."""
        if self._printed:
            self._out.print()
            self._printed.clear()


def print_message(message: Message) -> None:
    """Print a finalized message in full."""
    if message.is_user:
        label = "[bold yellow]You:[/bold yellow]"
    else:
        label = "[bold green]Assistant:[/bold green]"
    console.print(label, Text(message.text), f"[dim]{format_time(message.timestamp)}[/dim]")


def load_dictation(path: Path) -> ScriptedDictation:
    """Read one transcript per non-blank line of ``path``."""
    lines = path.read_text(encoding="utf-8").splitlines()
    return ScriptedDictation(line for line in lines if line.strip())


async def _settle(controller: SessionController, printer: RevealPrinter) -> None:
    """Wait for the pending reply (or greeting) and its reveal."""
    await controller.wait_idle()
    await controller.wait_revealed()
    printer.finish()


@app.command()
def chat(
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help=LOG_LEVEL_HELP
    ),
    dictate: Path | None = typer.Option(
        None,
        "--dictate",
        "-d",
        exists=True,
        dir_okay=False,
        help="Send each line of this file as a dictated message before prompting"
    )
):
    """Interactive line-mode chat."""
    store = get_store(console)
    settings = get_settings(console)
    debug = console_debug_callback(console, log_level) if log_level else None

    async def _chat():
        printer = RevealPrinter(console)
        controller = SessionController(store=store, settings=settings, debug_callback=debug)
        controller.set_reveal_callback(printer.on_frame)

        try:
            console.print("[bold cyan]AI Assistant[/bold cyan]")
            console.print("[dim]Type '/clear' to start over, 'exit', 'quit' or 'q' to leave[/dim]\n")

            for message in controller.messages:
                if not controller.is_revealing(message.id):
                    print_message(message)
            await _settle(controller, printer)

            if dictate is not None:
                dictation = load_dictation(dictate)
                while dictation.remaining:
                    if await controller.dictate(dictation):
                        user_message = controller.messages[-2]
                        console.print("[bold yellow]You (dictated):[/bold yellow]", Text(user_message.text))
                        await _settle(controller, printer)

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")
                except (KeyboardInterrupt, EOFError):
                    console.print("\n[dim]Goodbye![/dim]")
                    break

                command = user_input.strip().lower()
                if not command:
                    continue
                if command in ("exit", "quit", "q"):
                    console.print("[dim]Goodbye![/dim]")
                    break
                if command == "/clear":
                    controller.clear()
                    console.print("[dim]Chat cleared.[/dim]")
                    await _settle(controller, printer)
                    continue

                controller.send(user_input)
                console.print("[dim]AI is thinking...[/dim]")
                await _settle(controller, printer)

        finally:
            await controller.close()

    asyncio.run(_chat())


@app.command(name="tui")
def tui_command(
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help=LOG_LEVEL_HELP
    ),
    dictate: Path | None = typer.Option(
        None,
        "--dictate",
        "-d",
        exists=True,
        dir_okay=False,
        help="Replay each line of this file as a dictated message on Ctrl+G"
    )
):
    """Launch the Textual chat interface."""
    from .. import ui

    store = get_store(console)
    settings = get_settings(console)
    dictation = load_dictation(dictate) if dictate is not None else None
    asyncio.run(ui.run_textual_tui(
        store=store,
        settings=settings,
        log_level=log_level,
        dictation=dictation,
    ))


@app.command()
def history():
    """Show the saved conversation."""
    store = get_store(console)
    messages = store.load()

    if not messages:
        console.print("[yellow]No saved messages[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Time", style="dim", width=6)
    table.add_column("Author", width=10)
    table.add_column("Text")

    for i, message in enumerate(messages, 1):
        author_style = "yellow" if message.is_user else "green"
        table.add_row(
            str(i),
            format_time(message.timestamp),
            Text(message.author.value, style=author_style),
            Text(message.text),
        )

    console.print(table)
    console.print(f"[dim]{len(messages)} messages[/dim]")


@app.command()
def clear(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip confirmation prompt"
    )
):
    """Erase the saved conversation."""
    if not yes:
        console.print("[yellow]This will delete the saved conversation.[/yellow]")
        confirm = typer.confirm("Are you sure you want to continue?")
        if not confirm:
            console.print("[dim]Aborted.[/dim]")
            return

    store = get_store(console)
    store.clear()
    console.print("[green]Saved conversation cleared.[/green]")


def main() -> None:
    """Entry point for the ``buddychat`` console script."""
    app()


if __name__ == "__main__":
    main()
