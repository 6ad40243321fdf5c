# TODO/todo_app.py
from typing import List, Optional

import typer
from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from stickytodo.commands import Commands
from stickytodo.TODO.model import TodoItem
from stickytodo.TODO.tree import build_children_map

console = Console()

todo_app = typer.Typer(help="Manage the todo tree.")


def get_commands(ctx: typer.Context) -> Commands:
    return ctx.obj


@todo_app.callback()
def todo_main_callback(ctx: typer.Context):
    """
    Re-renders the full list once the command has reported, whenever it
    changed anything, the same way the widget reloads its view.
    """
    commands = get_commands(ctx)
    changed = []

    def reload_view():
        if changed:
            show_todos(commands)

    commands.subscribe(lambda: changed.append(True))
    ctx.call_on_close(reload_view)


def format_todo(todo: TodoItem) -> Text:
    """One tree label: checkbox, text, countdown and id."""
    if todo.completed:
        label = Text("✔ ", style="green")
        label.append(todo.text, style="strike dim")
    else:
        label = Text("• ", style="cyan")
        label.append(todo.text)
    if todo.has_counter:
        label.append(f"  ({todo.current_count}/{todo.target_count})", style="yellow")
    label.append(f"  #{todo.id}", style="dim")
    return label


def render_todos(todos: List[TodoItem]) -> Tree:
    """Builds a Rich tree from the flat list, siblings in position order."""
    children_map = build_children_map(todos)
    root = Tree("[bold cyan]ToDo[/bold cyan]", guide_style="dim")

    def add_children(branch: Tree, parent_id: Optional[int]):
        for todo in children_map.get(parent_id, []):
            add_children(branch.add(format_todo(todo)), todo.id)

    add_children(root, None)
    return root


def show_todos(commands: Commands):
    todos = commands.load_todos()
    if not todos:
        console.print("[yellow]No ToDo items yet.[/yellow]")
        return
    console.print(render_todos(todos))


def require_todo(commands: Commands, todo_id: int) -> TodoItem:
    todo = commands.find_todo(todo_id)
    if todo is None:
        console.print(f"[red]Error: ToDo {todo_id} not found.[/red]")
        raise typer.Exit(code=1)
    return todo


@todo_app.command("add")
def add_todo(
    ctx: typer.Context,
    text: str = typer.Argument(..., help="The text of the ToDo item."),
    parent_id: Optional[int] = typer.Option(None, "--parent", "-P", help="ID of the parent item."),
):
    """Add a ToDo item to the end of its list."""
    commands = get_commands(ctx)
    if parent_id is not None:
        require_todo(commands, parent_id)
    new_id = commands.add_todo_item(text, parent_id)
    if not new_id:
        console.print("[red]Error: Could not add ToDo.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Added ToDo #{new_id}: '{text}'[/green]")


@todo_app.command("list")
def list_todos(ctx: typer.Context):
    """Show the whole ToDo tree."""
    show_todos(get_commands(ctx))


@todo_app.command("done")
def complete_todo_command(
    ctx: typer.Context,
    todo_id: int = typer.Argument(..., help="The ID of the ToDo to check off."),
):
    """Check off a ToDo along with everything under it."""
    commands = get_commands(ctx)
    todo = require_todo(commands, todo_id)
    if not commands.update_todo_status(todo_id, True):
        console.print(f"[red]Error: Could not complete '{todo.text}'.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]ToDo '{todo.text}' marked as complete.[/green]")


@todo_app.command("undo")
def uncomplete_todo_command(
    ctx: typer.Context,
    todo_id: int = typer.Argument(..., help="The ID of the ToDo to uncheck."),
):
    """Uncheck a ToDo along with everything under it."""
    commands = get_commands(ctx)
    todo = require_todo(commands, todo_id)
    if not commands.update_todo_status(todo_id, False):
        console.print(f"[red]Error: Could not uncheck '{todo.text}'.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]ToDo '{todo.text}' marked as not done.[/green]")


@todo_app.command("edit")
def edit_todo_command(
    ctx: typer.Context,
    todo_id: int = typer.Argument(..., help="The ID of the ToDo to rename."),
    text: str = typer.Argument(..., help="New text."),
):
    """Change the text of a ToDo item."""
    commands = get_commands(ctx)
    require_todo(commands, todo_id)
    if not commands.update_todo_text(todo_id, text):
        console.print(f"[red]Error: Could not update ToDo {todo_id}.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]ToDo {todo_id} updated successfully.[/green]")


@todo_app.command("rm")
def delete_todo_command(
    ctx: typer.Context,
    todo_id: int = typer.Argument(..., help="The ID of the ToDo to delete."),
):
    """Delete a ToDo item and all of its sub-items."""
    commands = get_commands(ctx)
    todo = require_todo(commands, todo_id)
    if not commands.remove_todo_item(todo_id):
        console.print(f"[red]Error: Could not delete '{todo.text}'.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]ToDo '{todo.text}' (ID: {todo_id}) deleted successfully.[/green]")


@todo_app.command("mv")
def move_todo_command(
    ctx: typer.Context,
    todo_id: int = typer.Argument(..., help="The ID of the ToDo to move."),
    position: int = typer.Argument(..., help="Index in the target list after the move (0 is first)."),
    parent_id: Optional[int] = typer.Option(None, "--parent", "-P", help="New parent ID. Omit to move to the top level."),
):
    """Move a ToDo to another position and/or parent."""
    commands = get_commands(ctx)
    todo = require_todo(commands, todo_id)
    if not commands.move_todo_item(todo_id, parent_id, position):
        console.print(f"[red]Error: Could not move '{todo.text}'.[/red]")
        raise typer.Exit(code=1)
    console.print(f"[green]Moved '{todo.text}'.[/green]")


@todo_app.command("count")
def set_count_command(
    ctx: typer.Context,
    todo_id: int = typer.Argument(..., help="The ID of the ToDo."),
    count: Optional[int] = typer.Argument(None, help="How many times it has to be done."),
    clear: bool = typer.Option(False, "--clear", "-c", help="Remove the countdown."),
):
    """Give a ToDo a countdown, or remove it with --clear."""
    commands = get_commands(ctx)
    todo = require_todo(commands, todo_id)
    if clear:
        count = None
    elif count is None:
        console.print("[red]Error: Give a count or pass --clear.[/red]")
        raise typer.Exit(code=1)
    if not commands.set_todo_count(todo_id, count):
        console.print(f"[red]Error: Could not set the countdown of '{todo.text}'.[/red]")
        raise typer.Exit(code=1)
    if count is None:
        console.print(f"[green]Countdown removed from '{todo.text}'.[/green]")
    else:
        console.print(f"[green]'{todo.text}' now counts down from {count}.[/green]")


@todo_app.command("tick")
def decrement_command(
    ctx: typer.Context,
    todo_id: int = typer.Argument(..., help="The ID of the ToDo to count down."),
):
    """Count a ToDo down by one. It is checked off when it reaches zero."""
    commands = get_commands(ctx)
    todo = require_todo(commands, todo_id)
    if not todo.has_counter:
        console.print(f"[yellow]'{todo.text}' has no countdown.[/yellow]")
        raise typer.Exit(code=1)
    if not commands.decrement_todo(todo_id):
        console.print(f"[red]Error: Could not count down '{todo.text}'.[/red]")
        raise typer.Exit(code=1)
    remaining = max(todo.current_count - 1, 0)
    if remaining == 0:
        console.print(f"[green]'{todo.text}' is done![/green]")
    else:
        console.print(f"[green]'{todo.text}': {remaining} to go.[/green]")


@todo_app.command("reset")
def reset_command(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation."),
):
    """Uncheck every ToDo and restart every countdown."""
    if not yes and not typer.confirm("Uncheck all ToDo items?", default=False):
        raise typer.Exit(code=0)
    if not get_commands(ctx).reset_all_todos():
        console.print("[red]Error: Could not reset ToDo items.[/red]")
        raise typer.Exit(code=1)
    console.print("[green]All ToDo items reset.[/green]")
