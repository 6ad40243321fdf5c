# TODO/dashboard.py
from typing import List, Tuple

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TextColumn
from rich.table import Table

from stickytodo.commands import Commands
from stickytodo.TODO.model import TodoItem
from stickytodo.TODO.tree import ChildrenMap, build_children_map, descendant_ids, index_by_id

console = Console()


def leaf_progress(todos: List[TodoItem], children_map: ChildrenMap, todo: TodoItem) -> Tuple[int, int]:
    """(completed, total) over the leaves under a todo; a childless todo counts itself."""
    by_id = index_by_id(todos)
    leaves = [
        by_id[i] for i in descendant_ids(children_map, todo.id)
        if not children_map.get(i)
    ]
    if not leaves:
        leaves = [todo]
    done = sum(1 for leaf in leaves if leaf.completed)
    return done, len(leaves)


def show_dashboard(commands: Commands):
    """Completion progress for each top-level list, plus every running countdown."""
    todos = commands.load_todos()
    if not todos:
        console.print("[red]No ToDo items found.[/red]")
        raise typer.Exit()

    children_map = build_children_map(todos)
    roots = children_map.get(None, [])

    console.print(Panel("[bold blue]Progress[/bold blue]", expand=False))
    progress = Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        "[progress.percentage]{task.percentage:>3.0f}%",
        "•",
        "[green]{task.completed}/{task.total}",
        console=console,
    )
    total_done = total_leaves = 0
    with progress:
        for root in roots:
            done, total = leaf_progress(todos, children_map, root)
            total_done += done
            total_leaves += total
            style = "green" if root.completed else "cyan"
            progress.add_task(f"[{style}]{root.text}[/{style}]", total=total, completed=done)
    console.print(f"Done: [bold green]{total_done}[/bold green] of {total_leaves}\n")

    countdowns = [t for t in todos if t.has_counter]
    if not countdowns:
        return
    table = Table(
        title="[bold cyan]Countdowns[/bold cyan]",
        show_header=True,
        header_style="bold magenta",
        box=box.ROUNDED,
    )
    table.add_column("ID", justify="center", style="dim")
    table.add_column("ToDo", justify="left")
    table.add_column("Left", justify="center")
    table.add_column("Status", justify="center")
    for todo in countdowns:
        status = "[green]✔ Done[/green]" if todo.completed else "[yellow]Running[/yellow]"
        table.add_row(str(todo.id), todo.text, f"{todo.current_count}/{todo.target_count}", status)
    console.print(table)
