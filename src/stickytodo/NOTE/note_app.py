# NOTE/note_app.py
import typer
from rich.console import Console
from rich.panel import Panel

from stickytodo.commands import Commands

console = Console()

note_app = typer.Typer(help="Read and write the sticky note.")


@note_app.command("show")
def show_note(ctx: typer.Context):
    """Print the sticky note."""
    commands: Commands = ctx.obj
    content = commands.load_note()
    if not content:
        console.print("[yellow]The note is empty.[/yellow]")
        return
    console.print(Panel(content, title="📝 Note", expand=False))


@note_app.command("set")
def set_note(
    ctx: typer.Context,
    content: str = typer.Argument(..., help="New content of the note."),
):
    """Replace the sticky note."""
    commands: Commands = ctx.obj
    if not commands.save_note_content(content):
        console.print("[red]Error: Could not save the note.[/red]")
        raise typer.Exit(code=1)
    console.print("[green]Note saved.[/green]")


@note_app.command("clear")
def clear_note(ctx: typer.Context):
    """Empty the sticky note."""
    commands: Commands = ctx.obj
    if not commands.save_note_content(""):
        console.print("[red]Error: Could not clear the note.[/red]")
        raise typer.Exit(code=1)
    console.print("[green]Note cleared.[/green]")
