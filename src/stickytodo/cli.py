import time
from pathlib import Path
from typing import Optional

import typer
from plyer import notification
from rich.console import Console

from stickytodo.commands import Commands
from stickytodo.config import DB_ENV_VAR, REMINDER_TIMEOUT, REMINDER_TITLE
from stickytodo.logging_config import setup_logging
from stickytodo.NOTE.note_app import note_app
from stickytodo.TODO.dashboard import show_dashboard
from stickytodo.TODO.todo_app import todo_app

console = Console()

app = typer.Typer(help="A sticky note and a nested ToDo list.")
app.add_typer(todo_app, name="todo", help="Manage your ToDo tree.")
app.add_typer(note_app, name="note", help="Read and write the sticky note.")


@app.callback()
def main_callback(
    ctx: typer.Context,
    db: Optional[Path] = typer.Option(None, "--db", envvar=DB_ENV_VAR, help="Path to the SQLite database."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging."),
):
    """Opens the database before any command runs."""
    setup_logging(verbose)
    commands = Commands(db)
    if not commands.init():
        console.print(f"[yellow]Warning: storage at '{commands.db.path}' is unavailable. Showing defaults.[/yellow]")
    ctx.obj = commands
    ctx.call_on_close(commands.close)


def reminder_message(commands: Commands) -> str:
    todos = commands.load_todos()
    open_items = [t for t in todos if not t.completed]
    if not todos:
        return "Your ToDo list is empty."
    if not open_items:
        return "Everything is checked off. Nice!"
    return f"{len(open_items)} of {len(todos)} ToDo item(s) still open."


def show_reminder(commands: Commands):
    notification.notify(
        title=REMINDER_TITLE,
        message=reminder_message(commands),
        timeout=REMINDER_TIMEOUT,
    )


@app.command("remind")
def remind(
    ctx: typer.Context,
    every: float = typer.Option(0, "--every", "-e", help="Repeat every N hours instead of once."),
):
    """Pop up a desktop notification with the open ToDo count."""
    commands: Commands = ctx.obj
    show_reminder(commands)
    while every > 0:
        time.sleep(every * 60 * 60)
        show_reminder(commands)


@app.command("dashboard")
def dashboard(ctx: typer.Context):
    """View completion progress and running countdowns."""
    show_dashboard(ctx.obj)


if __name__ == "__main__":
    app()
