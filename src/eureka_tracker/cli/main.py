"""Main CLI interface for eureka-tracker."""

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from eureka_tracker.config import Settings, get_settings
from eureka_tracker.core.exceptions import EurekaTrackerError, to_result
from eureka_tracker.core.session_store import SessionStore
from eureka_tracker.core.vcs import GitAdapter
from eureka_tracker.log import configure_logging
from eureka_tracker.models.session import WorkSession
from eureka_tracker.services import Services, build_services

console = Console()


def _settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


def _services(ctx: click.Context) -> Services:
    """Build (once per invocation) the services for the selected workspace."""
    if "services" not in ctx.obj:
        factory: Callable[[Settings], Services] = ctx.obj.get(
            "services_factory", build_services
        )
        try:
            ctx.obj["services"] = factory(_settings(ctx))
        except EurekaTrackerError as e:
            _fail(ctx, e)
    return ctx.obj["services"]


def _store(settings: Settings) -> SessionStore:
    return SessionStore(
        settings.workspace_path,
        sessions_dir_name=settings.sessions_dir_name,
        marker_file_name=settings.marker_file_name,
    )


def _fail(ctx: click.Context, error: EurekaTrackerError) -> None:
    if ctx.obj.get("json"):
        click.echo(to_result(error).model_dump_json(by_alias=True, indent=2))
    else:
        console.print(f"[red]Error: {error.message}[/red]")
    ctx.exit(1)


def _emit_json(ctx: click.Context, outcome: Any, message: str) -> bool:
    """Print the structured result when --json was given."""
    if not ctx.obj.get("json"):
        return False
    click.echo(to_result(outcome, message).model_dump_json(by_alias=True, indent=2))
    return True


def _sessions_table(sessions: List[WorkSession]) -> Table:
    table = Table(title="Active work sessions")
    table.add_column("Task", style="cyan")
    table.add_column("Started")
    table.add_column("Branch")
    table.add_column("Baseline")
    for session in sessions:
        table.add_row(
            session.task_id,
            session.started_at.strftime("%Y-%m-%d %H:%M"),
            session.branch or "[dim]untracked[/dim]",
            (session.git_baseline or "")[:7],
        )
    return table


@click.group()
@click.version_option(package_name="eureka-tracker")
@click.option(
    "--workspace",
    type=click.Path(exists=True, file_okay=False),
    help="Workspace directory (defaults to EUREKA_WORKSPACE_PATH or the cwd)",
)
@click.option("--json", "as_json", is_flag=True, help="Print structured JSON results")
@click.pass_context
def main(ctx: click.Context, workspace: Optional[str], as_json: bool):
    """eureka-tracker - track work sessions on tasks with git."""
    ctx.ensure_object(dict)
    settings = ctx.obj.get("settings") or get_settings()
    if workspace:
        settings = settings.model_copy(
            update={"workspace_path": Path(workspace).resolve()}
        )
    ctx.obj["settings"] = settings
    ctx.obj["json"] = as_json
    configure_logging(settings)


@main.command()
@click.argument("task_id")
@click.pass_context
def start(ctx: click.Context, task_id: str):
    """Start a work session on a task, recording the git baseline."""
    services = _services(ctx)
    try:
        session = services.sessions.start(task_id)
    except EurekaTrackerError as e:
        _fail(ctx, e)
        return

    message = f"Started work session on task {task_id}"
    if _emit_json(ctx, session, message):
        return
    console.print(f"[green]🚀 {message}[/green]")
    if session.git_tracked:
        console.print(f"[bold]Branch:[/bold] {session.branch}")
        console.print(f"[bold]Baseline:[/bold] {session.git_baseline}")
    else:
        console.print("[yellow]Workspace is not a git repository; changes will not be captured.[/yellow]")


@main.command()
@click.argument("task_id")
@click.option("--summary", "-s", required=True, help="What was done in this session")
@click.option("--create-pr", is_flag=True, help="Open a pull request if the branch is ready")
@click.pass_context
def complete(ctx: click.Context, task_id: str, summary: str, create_pr: bool):
    """Complete a work session and upload the captured changes."""
    services = _services(ctx)
    try:
        result = services.sessions.complete(task_id, summary, create_pr=create_pr)
    except EurekaTrackerError as e:
        _fail(ctx, e)
        return

    if _emit_json(ctx, result, result.message):
        return
    console.print(f"[green]{result.message}[/green]")
    if result.pull_request is not None:
        pr = result.pull_request
        if pr.created and pr.result is not None:
            console.print(
                f"[green]✅ Pull request #{pr.result.pr_number} created: {pr.result.pr_url}[/green]"
            )
        else:
            console.print(f"[yellow]No pull request created: {pr.reason}[/yellow]")
    if result.pr_suggestion:
        console.print(Panel(result.pr_suggestion, title="Pull request"))


@main.command()
@click.argument("task_id")
@click.pass_context
def cancel(ctx: click.Context, task_id: str):
    """Cancel a work session and move the task back to todo."""
    services = _services(ctx)
    try:
        session = services.sessions.cancel(task_id)
    except EurekaTrackerError as e:
        _fail(ctx, e)
        return

    message = f"Cancelled work session for task {task_id}."
    if _emit_json(ctx, session, message):
        return
    console.print(f"[yellow]{message}[/yellow]")


@main.command()
@click.pass_context
def sessions(ctx: click.Context):
    """List open work sessions in this workspace."""
    active = list(_store(_settings(ctx)).load_all().values())
    if _emit_json(ctx, [s.to_json_dict() for s in active], f"{len(active)} active session(s)"):
        return
    if not active:
        console.print("No active work sessions.")
        return
    console.print(_sessions_table(active))


@main.command(name="branch-tasks")
@click.pass_context
def branch_tasks(ctx: click.Context):
    """List tasks tracked on the current branch."""
    services = _services(ctx)
    try:
        branch, tasks = services.pull_requests.list_branch_tasks()
    except EurekaTrackerError as e:
        _fail(ctx, e)
        return

    data: Dict[str, Any] = {
        "branchName": branch,
        "taskCount": len(tasks),
        "tasks": [t.model_dump(mode="json", by_alias=True) for t in tasks],
    }
    if _emit_json(ctx, data, f"{len(tasks)} task(s) on branch {branch}"):
        return
    if not tasks:
        console.print(
            f"No tasks found in branch \"{branch}\". Use 'start' to track tasks in this branch."
        )
        return
    table = Table(title=f"Tasks on {branch}")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Status")
    for task in tasks:
        style = "green" if task.is_done else "yellow"
        table.add_row(task.id, task.title, f"[{style}]{task.status}[/{style}]")
    console.print(table)


@main.command(name="create-pr")
@click.option("--title", help="Pull request title (generated from the tasks if omitted)")
@click.option("--base", "base_branch", help="Base branch for the pull request")
@click.pass_context
def create_pr(ctx: click.Context, title: Optional[str], base_branch: Optional[str]):
    """Create a pull request for the current branch."""
    services = _services(ctx)
    try:
        outcome = services.pull_requests.create_for_branch(title, base_branch)
    except EurekaTrackerError as e:
        _fail(ctx, e)
        return

    result = outcome.result
    message = f"Created pull request #{result.pr_number}: {result.pr_url}"
    if _emit_json(ctx, outcome, message):
        return
    console.print(f"[green]✅ {message}[/green]")
    console.print(f"[bold]Linked tasks:[/bold] {result.updated_task_count}")
    if outcome.auto_created_task is not None:
        console.print(
            f"📝 Created task automatically: {outcome.auto_created_task.title}"
        )


@main.command()
@click.pass_context
def status(ctx: click.Context):
    """Show repository, marker and session status for the workspace."""
    settings = _settings(ctx)
    vcs = GitAdapter(settings.workspace_path)
    store = _store(settings)

    console.print(f"[bold]Workspace:[/bold] {settings.workspace_path}")
    if vcs.is_repository():
        try:
            console.print(f"[bold]Branch:[/bold] {vcs.current_branch()}")
            console.print(f"[bold]HEAD:[/bold] {vcs.current_revision()[:7]}")
            dirty = "yes" if vcs.has_uncommitted_changes() else "no"
            console.print(f"[bold]Uncommitted changes:[/bold] {dirty}")
        except EurekaTrackerError as e:
            console.print(f"[yellow]Git: {e.message}[/yellow]")
        remote = vcs.remote_url()
        if remote:
            console.print(f"[bold]Remote:[/bold] {remote}")
    else:
        console.print("[yellow]Not a git repository (sessions are untracked)[/yellow]")

    marker = store.read_marker()
    if marker:
        console.print(f"[bold]Active marker:[/bold] task {marker.get('taskId')}")
    else:
        console.print("[bold]Active marker:[/bold] none")

    active = list(store.load_all().values())
    if active:
        console.print(_sessions_table(active))
    else:
        console.print("No active work sessions.")

    if settings.api_url and settings.api_key:
        try:
            suggestion = _services(ctx).branches.suggest_pull_request()
        except EurekaTrackerError as e:
            console.print(f"[yellow]Could not check branch status: {e.message}[/yellow]")
            return
        if suggestion:
            console.print(Panel(suggestion, title="Pull request"))


if __name__ == "__main__":
    main()
