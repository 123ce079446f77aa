"""
Main CLI application for Page Agent.

Provides the primary command-line interface for:
- Analyzing pages from files, stdin, or URLs
- Serving the HTTP API
- Managing the task board
- Viewing configuration
"""

import asyncio
import json
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from page_agent import __version__
from page_agent.analysis import AgentInsight, PageAnalyzer
from page_agent.config import Settings, get_default_config_path, load_config
from page_agent.core.exceptions import PageAgentError, ValidationError
from page_agent.fetch import PageFetcher
from page_agent.storage import Database, TaskPriority, TaskRecord, TaskRepository, TaskStatus
from page_agent.utils.logging import get_logger, setup_logging

# Initialize Typer app
app = typer.Typer(
    name="page-agent",
    help="Page Agent - Turn web pages into summaries and action items",
    add_completion=False,
    no_args_is_help=True,
)
tasks_app = typer.Typer(help="Manage the task board", no_args_is_help=True)
config_app = typer.Typer(help="Configuration management", no_args_is_help=True)
app.add_typer(tasks_app, name="tasks")
app.add_typer(config_app, name="config")

console = Console()
logger = get_logger(__name__)

STATUS_STYLES = {
    TaskStatus.BACKLOG: "yellow",
    TaskStatus.IN_PROGRESS: "cyan",
    TaskStatus.DONE: "green",
}


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]Page Agent[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """
    Page Agent - Analyze pages and track the work they suggest.

    Use 'page-agent --help' for command list.
    """
    config_path = config_file or get_default_config_path()
    try:
        settings = load_config(config_path)
    except PageAgentError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    setup_logging(settings.logging, level="DEBUG" if verbose else None)
    ctx.obj = {"settings": settings, "config_path": config_path}


def _settings(ctx: typer.Context) -> Settings:
    return ctx.obj["settings"]


# =============================================================================
# Analyze
# =============================================================================


@app.command()
def analyze(
    ctx: typer.Context,
    source: str = typer.Argument(
        ...,
        help="HTML file path, '-' for stdin, or an http(s) URL to fetch",
    ),
    url: Optional[str] = typer.Option(
        None,
        "--url",
        "-u",
        help="Page URL, used for the domain when analyzing a file or stdin",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the insight as JSON",
    ),
) -> None:
    """
    Analyze a page and show its insight.

    Examples:
        page-agent analyze saved-page.html --url https://example.com/post
        curl -s https://example.com | page-agent analyze -
        page-agent analyze https://example.com/post --json
    """
    settings = _settings(ctx)

    try:
        html, source_url = _read_source(settings, source, url)
    except PageAgentError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    except OSError as e:
        console.print(f"[red]Error:[/red] Cannot read {source}: {e}")
        raise typer.Exit(1)

    insight = PageAnalyzer(settings=settings.analysis).analyze(html, source_url)

    if as_json:
        typer.echo(json.dumps(insight.to_dict(), indent=2, ensure_ascii=False))
        return

    _print_insight(insight, source_url)


def _read_source(
    settings: Settings,
    source: str,
    url: Optional[str],
) -> tuple[str, Optional[str]]:
    """Return the markup for a source and the URL it belongs to."""
    if source == "-":
        return sys.stdin.read(), url

    if source.lower().startswith(("http://", "https://")):
        fetcher = PageFetcher(settings.fetch)
        with console.status(f"Fetching {source}..."):
            page = asyncio.run(fetcher.fetch(source))
        return page.html, url or page.url

    return Path(source).read_text(encoding="utf-8", errors="replace"), url


def _print_insight(insight: AgentInsight, source_url: Optional[str]) -> None:
    """Render an insight with rich panels."""
    metadata = insight.metadata

    details = Table(show_header=False, box=None)
    details.add_column("Field", style="dim")
    details.add_column("Value")
    details.add_row("Title", escape(metadata.title or "Untitled page"))
    details.add_row("Author", escape(metadata.byline or "Unknown"))
    details.add_row("Characters", f"{metadata.length:,}")
    details.add_row("Domain", metadata.domain or "Not provided")
    if metadata.language:
        details.add_row("Language", metadata.language)
    if source_url:
        details.add_row("Source", escape(source_url))

    console.print(Panel(details, title="[bold]Page[/bold]", border_style="blue"))

    console.print(Panel(
        escape(insight.summary),
        title="[bold]Summary[/bold]",
        border_style="green",
    ))

    if metadata.description:
        console.print(Panel(
            escape(metadata.description),
            title="[bold]Description[/bold]",
            border_style="dim",
        ))

    _print_list("Key Points", insight.key_points, "No key points detected.")
    _print_list("Suggested Actions", insight.action_items, "No actions detected.")
    _print_list("Outline", metadata.headings, "No headings found.")


def _print_list(title: str, items: tuple[str, ...], empty: str) -> None:
    if items:
        body = "\n".join(f"[cyan]{index}.[/cyan] {escape(item)}" for index, item in enumerate(items, 1))
    else:
        body = f"[dim]{empty}[/dim]"
    console.print(Panel(body, title=f"[bold]{title}[/bold]", border_style="cyan"))


# =============================================================================
# Serve
# =============================================================================


@app.command()
def serve(
    ctx: typer.Context,
    host: Optional[str] = typer.Option(
        None,
        "--host",
        help="Interface to bind (default from config)",
    ),
    port: Optional[int] = typer.Option(
        None,
        "--port",
        "-p",
        help="Port to listen on (default from config)",
        min=1,
        max=65535,
    ),
) -> None:
    """
    Serve the HTTP API.

    Example:
        page-agent serve --port 8080
    """
    import uvicorn

    from page_agent.api import create_app

    settings = _settings(ctx)

    try:
        api = create_app(settings)
    except PageAgentError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    bind_host = host or settings.server.host
    bind_port = port or settings.server.port
    console.print(f"[green]Serving Page Agent API on http://{bind_host}:{bind_port}[/green]")
    uvicorn.run(api, host=bind_host, port=bind_port, log_level=settings.logging.level.lower())


# =============================================================================
# Tasks
# =============================================================================


@contextmanager
def _task_repository(ctx: typer.Context) -> Iterator[TaskRepository]:
    """Open the database for one command and close it afterwards."""
    try:
        db = Database.create(_settings(ctx))
    except PageAgentError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    try:
        yield TaskRepository(db)
    except ValidationError as e:
        console.print(f"[red]Invalid input:[/red] {e}")
        raise typer.Exit(1)
    except PageAgentError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    finally:
        db.close()


def _parse_status(value: Optional[str]) -> Optional[TaskStatus]:
    if value is None:
        return None
    try:
        return TaskStatus(value.lower().replace("-", "_").replace(" ", "_"))
    except ValueError:
        choices = ", ".join(status.value for status in TaskStatus)
        raise ValidationError(f"Unknown status {value!r} (choose from {choices})")


def _parse_priority(value: Optional[str]) -> Optional[TaskPriority]:
    if value is None:
        return None
    try:
        return TaskPriority(value.lower())
    except ValueError:
        choices = ", ".join(priority.value for priority in TaskPriority)
        raise ValidationError(f"Unknown priority {value!r} (choose from {choices})")


def _print_task(verb: str, task: TaskRecord) -> None:
    style = STATUS_STYLES[task.status]
    console.print(
        f"[green]✓[/green] {verb} task [dim]{task.id}[/dim]: {escape(task.title)} "
        f"([{style}]{task.status.label}[/{style}], {task.priority.value})"
    )


@tasks_app.command("list")
def list_tasks(
    ctx: typer.Context,
    status: Optional[str] = typer.Option(
        None,
        "--status",
        "-s",
        help="Only show tasks with this status (backlog, in_progress, done)",
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        help="Maximum tasks to show",
        min=1,
    ),
) -> None:
    """Show the task board, newest first."""
    with _task_repository(ctx) as tasks:
        records = tasks.list_all(status=_parse_status(status), limit=limit)
        counts = tasks.count_by_status()

    summary = "   ".join(
        f"[{STATUS_STYLES[s]}]{s.label}[/{STATUS_STYLES[s]}]: {count}"
        for s, count in counts.items()
    )
    console.print(Panel(summary, title="[bold]Task Board[/bold]", border_style="blue"))

    if not records:
        console.print("[dim]No tasks yet. Promote an action or add one.[/dim]")
        return

    table = Table(show_header=True)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title")
    table.add_column("Status")
    table.add_column("Priority")
    table.add_column("Page", style="cyan")

    for task in records:
        style = STATUS_STYLES[task.status]
        page = task.page_url or ""
        table.add_row(
            task.id,
            escape(task.title),
            f"[{style}]{task.status.label}[/{style}]",
            task.priority.value,
            escape(page[:40] + "..." if len(page) > 40 else page),
        )

    console.print(table)


@tasks_app.command("add")
def add_task(
    ctx: typer.Context,
    title: str = typer.Argument(..., help="Task title"),
    priority: str = typer.Option("medium", "--priority", "-p", help="low, medium or high"),
    status: str = typer.Option("backlog", "--status", "-s", help="backlog, in_progress or done"),
    page_url: Optional[str] = typer.Option(None, "--url", "-u", help="Page the task relates to"),
    notes: Optional[str] = typer.Option(None, "--notes", "-n", help="Free-form notes"),
) -> None:
    """Add a task to the board."""
    with _task_repository(ctx) as tasks:
        task = tasks.create(TaskRecord(
            title=title,
            status=_parse_status(status),
            priority=_parse_priority(priority),
            page_url=page_url,
            notes=notes,
        ))

    _print_task("Added", task)


@tasks_app.command("promote")
def promote_action(
    ctx: typer.Context,
    action: str = typer.Argument(..., help="Action item text to track"),
    source: Optional[str] = typer.Option(
        None,
        "--source",
        "-s",
        help="URL of the page the action came from",
    ),
) -> None:
    """
    Turn a suggested action into a backlog task.

    Example:
        page-agent tasks promote "Update the billing contact" --source https://example.com
    """
    with _task_repository(ctx) as tasks:
        if not action.strip():
            raise ValidationError("Action text must not be empty")
        task = tasks.create(TaskRecord(
            title=action.strip(),
            status=TaskStatus.BACKLOG,
            priority=TaskPriority.MEDIUM,
            page_url=source,
        ))

    _print_task("Promoted", task)


@tasks_app.command("set")
def update_task(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID"),
    status: Optional[str] = typer.Option(None, "--status", "-s", help="New status"),
    priority: Optional[str] = typer.Option(None, "--priority", "-p", help="New priority"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    notes: Optional[str] = typer.Option(None, "--notes", "-n", help="New notes"),
) -> None:
    """Change the status, priority, title or notes of a task."""
    if status is None and priority is None and title is None and notes is None:
        console.print("Nothing to change. Use --status, --priority, --title or --notes.")
        raise typer.Exit(1)

    with _task_repository(ctx) as tasks:
        changes = {
            "status": _parse_status(status),
            "priority": _parse_priority(priority),
            "title": title,
            "notes": notes,
        }
        changes = {name: value for name, value in changes.items() if value is not None}
        task = tasks.update(task_id, **changes)

    _print_task("Updated", task)


@tasks_app.command("remove")
def remove_task(
    ctx: typer.Context,
    task_id: str = typer.Argument(..., help="Task ID"),
) -> None:
    """Delete a task."""
    with _task_repository(ctx) as tasks:
        tasks.delete(task_id)

    console.print(f"[green]✓[/green] Removed task [dim]{task_id}[/dim]")


# =============================================================================
# Config
# =============================================================================


@config_app.command("show")
def show_config(ctx: typer.Context) -> None:
    """Show the effective configuration."""
    config_path = ctx.obj["config_path"]
    config_dict = _settings(ctx).model_dump(mode="json")

    console.print(Panel(
        f"[bold]Current Configuration[/bold]\n[dim]{config_path or 'defaults'}[/dim]",
        border_style="blue",
    ))

    for section, values in config_dict.items():
        console.print(f"\n[bold cyan]{section}:[/bold cyan]")
        if isinstance(values, dict):
            for key, value in values.items():
                console.print(f"  {key}: [dim]{value}[/dim]", soft_wrap=True)
        else:
            console.print(f"  {values}")


@config_app.command("init")
def init_config(
    output: Path = typer.Option(
        Path("config.yaml"),
        "--output",
        "-o",
        help="Output path for config file",
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> None:
    """Write the default configuration to a YAML file."""
    import yaml

    if output.exists() and not force:
        if not typer.confirm(f"File {output} exists. Overwrite?"):
            raise typer.Exit(0)

    with open(output, "w", encoding="utf-8") as f:
        yaml.dump(Settings().model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)

    console.print(f"[green]✓[/green] Configuration saved to: {output}")


if __name__ == "__main__":
    app()
