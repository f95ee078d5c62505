"""CLI application using Typer."""

try:
    import typer
    from rich.console import Console
    from rich.table import Table
except ImportError as e:
    raise ImportError(
        "CLI requires typer and rich. Install with: pip install task-ledger-mcp[cli]"
    ) from e

import json
import sys
from typing import Any, List, Optional

from task_ledger_mcp.domain.entities.result_types import DomainResult
from task_ledger_mcp.domain.entities.task import UNSET
from task_ledger_mcp.services import get_service_factory

console = Console()
app = typer.Typer(
    name="ledger",
    help="Task Ledger - per-user tasks, projects and tags",
    no_args_is_help=True,
)

USER_OPTION = typer.Option(..., "--user", "-u", help="Owning user ID", envvar="LEDGER_USER")


def _fail(result: DomainResult[Any]) -> None:
    console.print(f"[red]Error:[/red] {result.error_message}")
    raise typer.Exit(1)


def _missing(kind: str, entity_id: str) -> None:
    console.print(f"[yellow]{kind} not found:[/yellow] {entity_id}")


# Project commands
project_app = typer.Typer(help="Project management commands")
app.add_typer(project_app, name="project")


@project_app.command("create")
def project_create(
    name: str = typer.Argument(..., help="Project name"),
    user: str = USER_OPTION,
    color: Optional[str] = typer.Option(None, "--color", help="Display color"),
) -> None:
    """Create a new project."""
    service = get_service_factory().get_project_service()
    result = service.create_project(user, name=name, color=color)

    if result.is_success:
        console.print(f"[green]Project created:[/green] {result.data['id']}")
        console.print(f"Name: {result.data['name']}")
    else:
        _fail(result)


@project_app.command("list")
def project_list(
    user: str = USER_OPTION,
    include_deleted: bool = typer.Option(False, "--deleted", help="Include soft-deleted"),
) -> None:
    """List projects with their counters."""
    service = get_service_factory().get_project_service()
    result = service.list_projects(user, include_deleted=include_deleted)

    if result.is_failure:
        _fail(result)
    projects = result.data or []
    if not projects:
        console.print("No projects found.")
        return

    table = Table(title="Projects")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="green")
    table.add_column("Open")
    table.add_column("Tasks")

    for p in projects:
        name = p["name"] if not p["deleted_at"] else f"[dim]{p['name']} (deleted)[/dim]"
        table.add_row(p["id"], name, str(p["open_count"]), str(p["task_count"]))

    console.print(table)


@project_app.command("show")
def project_show(
    project_id: str = typer.Argument(..., help="Project ID"),
    user: str = USER_OPTION,
    format: str = typer.Option("text", "--format", "-f", help="Output format (text/json)"),
) -> None:
    """Show a project."""
    service = get_service_factory().get_project_service()
    result = service.get_project(user, project_id)

    if result.is_failure:
        _fail(result)
    if format == "json":
        json.dump({"success": True, "data": result.data}, sys.stdout, default=str)
        sys.stdout.write("\n")
        return
    data = result.data
    if data is None:
        _missing("Project", project_id)
        return
    console.print(f"\n[bold]{data['name']}[/bold]")
    console.print(f"ID: {data['id']}")
    console.print(f"Open: {data['open_count']} / Tasks: {data['task_count']}")
    if data.get("deleted_at"):
        console.print(f"Deleted: {data['deleted_at']}")


@project_app.command("recount")
def project_recount(
    project_id: str = typer.Argument(..., help="Project ID"),
    user: str = USER_OPTION,
) -> None:
    """Recompute a project's counters from its tasks."""
    service = get_service_factory().get_project_service()
    result = service.recount_project(user, project_id)

    if result.is_failure:
        _fail(result)
    if result.data is None:
        _missing("Project", project_id)
        return
    console.print(
        f"[green]Recounted:[/green] open={result.data['open_count']} "
        f"tasks={result.data['task_count']}"
    )


@project_app.command("delete")
def project_delete(
    project_id: str = typer.Argument(..., help="Project ID"),
    user: str = USER_OPTION,
    hard: bool = typer.Option(False, "--hard", help="Remove documents instead of soft-deleting"),
) -> None:
    """Delete a project and all of its tasks."""
    service = get_service_factory().get_project_service()
    result = service.remove_project(user, project_id, soft=not hard)

    if result.is_failure:
        _fail(result)
    if result.data is None:
        _missing("Project", project_id)
        return
    console.print(f"[green]Project deleted:[/green] {project_id} ({result.data['tasks']} tasks)")


# Tag commands
tag_app = typer.Typer(help="Tag management commands")
app.add_typer(tag_app, name="tag")


@tag_app.command("create")
def tag_create(
    name: str = typer.Argument(..., help="Tag name"),
    user: str = USER_OPTION,
    color: Optional[str] = typer.Option(None, "--color", help="Display color"),
) -> None:
    """Create a new tag."""
    service = get_service_factory().get_tag_service()
    result = service.create_tag(user, name=name, color=color)

    if result.is_success:
        console.print(f"[green]Tag created:[/green] {result.data['id']}")
    else:
        _fail(result)


@tag_app.command("list")
def tag_list(user: str = USER_OPTION) -> None:
    """List tags with their usage counts."""
    service = get_service_factory().get_tag_service()
    result = service.list_tags(user)

    if result.is_failure:
        _fail(result)
    tags = result.data or []
    if not tags:
        console.print("No tags found.")
        return

    table = Table(title="Tags")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="green")
    table.add_column("Used")
    for t in tags:
        table.add_row(t["id"], t["name"], str(t["usage_count"]))
    console.print(table)


@tag_app.command("delete")
def tag_delete(
    tag_id: str = typer.Argument(..., help="Tag ID"),
    user: str = USER_OPTION,
    with_tasks: bool = typer.Option(
        False, "--with-tasks", help="Delete the tagged tasks instead of untagging them"
    ),
) -> None:
    """Delete a tag."""
    service = get_service_factory().get_tag_service()
    result = service.remove_tag(user, tag_id, remove_only=not with_tasks)

    if result.is_failure:
        _fail(result)
    if result.data is None:
        _missing("Tag", tag_id)
        return
    console.print(f"[green]Tag deleted:[/green] {tag_id} ({result.data['tasks']} tasks affected)")


# Task commands
task_app = typer.Typer(help="Task management commands")
app.add_typer(task_app, name="task")

STATUS_ICONS = {"DONE": "[green]✓", "IN_PROGRESS": "[yellow]→", "BLOCKED": "[red]✗"}


@task_app.command("create")
def task_create(
    title: str = typer.Argument(..., help="Task title"),
    user: str = USER_OPTION,
    project_id: Optional[str] = typer.Option(None, "--project", "-p", help="Project ID"),
    parent_id: Optional[str] = typer.Option(None, "--parent", help="Parent task ID"),
    tag_ids: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Tag ID (repeatable)"),
    priority: Optional[str] = typer.Option(None, "--priority", help="Priority"),
) -> None:
    """Create a new task."""
    service = get_service_factory().get_task_service()
    result = service.create_task(
        user,
        title=title,
        project_id=project_id,
        parent_id=parent_id,
        tag_ids=tag_ids or [],
        priority=priority,
    )

    if result.is_success:
        console.print(f"[green]Task created:[/green] {result.data['id']}")
        console.print(f"Title: {result.data['title']}")
    else:
        _fail(result)


@task_app.command("list")
def task_list(
    user: str = USER_OPTION,
    project_id: Optional[str] = typer.Option(None, "--project", "-p", help="Project ID"),
    status: Optional[str] = typer.Option(None, "--status", "-s", help="Filter by status"),
    limit: int = typer.Option(50, "--limit", "-n", help="Page size"),
) -> None:
    """List live tasks."""
    service = get_service_factory().get_task_service()
    result = service.list_tasks(
        user, project_id=project_id, status=status, deleted=False, limit=limit
    )

    if result.is_failure:
        _fail(result)
    tasks = result.data or []
    if not tasks:
        console.print("No tasks found.")
        return
    for t in tasks:
        icon = STATUS_ICONS.get(t["status"], "○")
        archived = " [dim](archived)[/dim]" if t.get("archived_at") else ""
        console.print(f"  {icon}[/] {t['title']} [cyan]{t['id']}[/cyan]{archived}")


def _print_task(result: DomainResult[Any], task_id: str, verb: str) -> None:
    if result.is_failure:
        _fail(result)
    if result.data is None:
        _missing("Task", task_id)
        return
    console.print(f"[green]Task {verb}:[/green] {result.data['title']}")


@task_app.command("complete")
def task_complete(
    task_id: str = typer.Argument(..., help="Task ID"),
    user: str = USER_OPTION,
) -> None:
    """Mark a task as done."""
    service = get_service_factory().get_task_service()
    _print_task(service.complete_task(user, task_id), task_id, "completed")


@task_app.command("archive")
def task_archive(
    task_id: str = typer.Argument(..., help="Task ID"),
    user: str = USER_OPTION,
) -> None:
    """Archive a task."""
    service = get_service_factory().get_task_service()
    _print_task(service.archive_task(user, task_id), task_id, "archived")


@task_app.command("restore")
def task_restore(
    task_id: str = typer.Argument(..., help="Task ID"),
    user: str = USER_OPTION,
) -> None:
    """Restore a soft-deleted task."""
    service = get_service_factory().get_task_service()
    _print_task(service.restore_task(user, task_id), task_id, "restored")


@task_app.command("move")
def task_move(
    task_id: str = typer.Argument(..., help="Task ID"),
    user: str = USER_OPTION,
    project_id: Optional[str] = typer.Option(None, "--project", "-p", help="Target project ID"),
    no_project: bool = typer.Option(False, "--no-project", help="Detach from its project"),
    parent_id: Optional[str] = typer.Option(None, "--parent", help="Target parent task ID"),
    top_level: bool = typer.Option(False, "--top-level", help="Detach from its parent"),
) -> None:
    """Move a task to another project or parent."""
    target_project: Any = None if no_project else (project_id or UNSET)
    target_parent: Any = None if top_level else (parent_id or UNSET)
    service = get_service_factory().get_task_service()
    result = service.move_task(user, task_id, project_id=target_project, parent_id=target_parent)
    _print_task(result, task_id, "moved")


@task_app.command("delete")
def task_delete(
    task_id: str = typer.Argument(..., help="Task ID"),
    user: str = USER_OPTION,
    hard: bool = typer.Option(False, "--hard", help="Remove documents instead of soft-deleting"),
) -> None:
    """Delete a task and its subtasks."""
    service = get_service_factory().get_task_service()
    result = service.remove_task(user, task_id, soft=not hard)

    if result.is_failure:
        _fail(result)
    if result.data is None:
        _missing("Task", task_id)
        return
    console.print(f"[green]Deleted {len(result.data['task_ids'])} task(s)[/green]")


def create_app() -> typer.Typer:
    """Create and return the Typer app."""
    return app
