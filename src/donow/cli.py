"""Command-line interface for donow."""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .collection import TaskCollection
from .config import Config
from .logging_setup import setup_logging
from .parser import SmartDateParser, suggest_names
from .storage import TodoTxtStorage, get_storage
from .todo import Task
from .utils.datetime import today, format_date
from .utils.validation import MalformedError, MultipleParseError


console = Console()


def format_task_for_display(task: Task) -> str:
    """Format a task line with rich markup."""
    text = escape(task.to_string())
    if task.done:
        return f"[dim]{text}[/dim]"

    priority_colors = {"A": "red", "B": "yellow", "C": "green"}
    color = priority_colors.get(task.priority)
    try:
        if task.is_overdue():
            color = "bold red"
    except MalformedError:
        color = "magenta"
    if color:
        return f"[{color}]{text}[/{color}]"
    return text


def _fail(message: str):
    console.print(f"[red]Error: {escape(message)}[/red]")
    sys.exit(1)


def _load(storage: TodoTxtStorage) -> TaskCollection:
    """Load the todo file, reporting every malformed line before exiting."""
    try:
        return storage.load()
    except MultipleParseError as e:
        console.print(f"[red]Error: {escape(str(storage.path))} has {len(e)} malformed line(s)[/red]")
        for number, error in e.errors:
            console.print(f"  line {number}: {escape(str(error))}")
        sys.exit(1)


def _parse_date_option(value: str):
    parsed = SmartDateParser().parse(value)
    if parsed is None:
        _fail(f"Could not understand date '{value}'. Use YYYY-MM-DD.")
    return parsed


def _save(ctx, collection: TaskCollection):
    ctx.obj['storage'].save(collection, rearrange=ctx.obj['config'].sort_on_save)


def _index(collection: TaskCollection, number: int) -> int:
    """Convert a 1-based task number as shown by ``list`` to an index."""
    if not 1 <= number <= len(collection):
        _fail(f"task number {number} out of range for a list of {len(collection)}")
    return number - 1


@click.group()
@click.option("--file", "-f", "todo_file", type=click.Path(dir_okay=False),
              help="Path to todo.txt file")
@click.option("--config", type=click.Path(), help="Path to config file")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.pass_context
def main(ctx, todo_file, config, verbose):
    """donow - manage a todo.txt file."""
    ctx.ensure_object(dict)

    cfg = Config.reload(Path(config) if config else None)
    setup_logging("DEBUG" if verbose else cfg.log_level)
    console.no_color = cfg.no_color

    ctx.obj['config'] = cfg
    ctx.obj['storage'] = get_storage(cfg, todo_file)


@main.command(name="list")
@click.option("--all/--open", "show_all", default=None, help="Include or hide done tasks")
@click.option("--project", "-p", help="Only tasks with this +project")
@click.option("--context", "-c", help="Only tasks with this @context")
@click.pass_context
def list_tasks(ctx, show_all, project, context):
    """List tasks with their numbers."""
    collection = _load(ctx.obj['storage'])
    if show_all is None:
        show_all = ctx.obj['config'].show_completed

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Task")

    shown = 0
    for number, task in enumerate(collection, start=1):
        if task.done and not show_all:
            continue
        if project and project not in task.projects:
            continue
        if context and context not in task.contexts:
            continue
        table.add_row(str(number), format_task_for_display(task))
        shown += 1

    if shown == 0:
        console.print("[yellow]No tasks found[/yellow]")
        for name, available, sigil in ((project, collection.get_projects(), "+"),
                                       (context, collection.get_contexts(), "@")):
            if name:
                for match in suggest_names(name, available)[:1]:
                    console.print(f"Did you mean {sigil}{escape(match)} instead of {sigil}{escape(name)}?")
        return

    console.print(table)


@main.command()
@click.argument("text", required=True)
@click.option("--priority", "-p", help="Priority letter A-Z")
@click.option("--due", "-d", help="Due date (YYYY-MM-DD or e.g. 'tomorrow')")
@click.pass_context
def add(ctx, text, priority, due):
    """Add a new task."""
    cfg = ctx.obj['config']
    storage = ctx.obj['storage']
    collection = _load(storage)

    if due:
        text = f"{text} due:{format_date(_parse_date_option(due))}"

    try:
        task = Task.create(
            text,
            creation_date=today() if cfg.add_creation_date else None,
            priority=priority.upper() if priority else cfg.default_priority,
        )
    except MalformedError as e:
        _fail(str(e))

    collection.add(task)
    _save(ctx, collection)
    console.print(f"[green]Added task {len(collection)}:[/green] {escape(str(task))}")


@main.command(name="do")
@click.argument("number", type=int)
@click.pass_context
def do_task(ctx, number):
    """Toggle task NUMBER between done and open."""
    collection = _load(ctx.obj['storage'])
    task = collection.toggle_status(_index(collection, number))
    _save(ctx, collection)

    verb = "Completed" if task.done else "Reopened"
    console.print(f"[green]{verb}:[/green] {escape(str(task))}")


@main.command(name="rm")
@click.argument("number", type=int)
@click.pass_context
def remove_task(ctx, number):
    """Remove task NUMBER."""
    collection = _load(ctx.obj['storage'])
    task = collection.remove(_index(collection, number))
    _save(ctx, collection)
    console.print(f"[green]Removed:[/green] {escape(str(task))}")


@main.command()
@click.pass_context
def projects(ctx):
    """List all projects."""
    collection = _load(ctx.obj['storage'])
    for name in collection.get_projects():
        console.print(f"+{escape(name)}")


@main.command()
@click.pass_context
def contexts(ctx):
    """List all contexts."""
    collection = _load(ctx.obj['storage'])
    for name in collection.get_contexts():
        console.print(f"@{escape(name)}")


@main.command()
@click.option("--by", "by_date", default="today", help="Show tasks due on or before this date")
@click.pass_context
def due(ctx, by_date):
    """List tasks that are due."""
    collection = _load(ctx.obj['storage'])
    limit = _parse_date_option(by_date)

    try:
        indices = collection.get_due(limit)
    except MultipleParseError as e:
        for number, error in e.errors:
            console.print(f"[red]Error: task {number}: {escape(str(error))}[/red]")
        sys.exit(1)

    if not indices:
        console.print(f"[yellow]Nothing due by {format_date(limit)}[/yellow]")
        return

    for index in indices:
        console.print(f"{index + 1}. {format_task_for_display(collection[index])}")


@main.command(name="sort")
@click.pass_context
def sort_tasks(ctx):
    """Reorder the file: open tasks first, then by priority."""
    storage = ctx.obj['storage']
    collection = _load(storage)
    collection.rearrange()
    storage.save(collection)
    console.print(f"[green]Sorted {len(collection)} task(s)[/green]")


if __name__ == "__main__":
    main()
