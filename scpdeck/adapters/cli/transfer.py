"""
Transfer CLI commands
"""
import asyncio
import os
import sys
from typing import Awaitable, Callable, Dict, List, Optional

import typer
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ...core.constants import DOT_ENTRIES
from ...core.exceptions import ConfigError, PayloadError, TransferBusyError
from ...core.logging import get_logger, get_stdout_console, get_stderr_console
from ...domain.transfer import TaskStatus, TransferBatch, TransferItemStatus
from .services import Services, build_services

logger = get_logger(__name__)
stdout_console = get_stdout_console()
stderr_console = get_stderr_console()

_STATE_STYLES = {
    TaskStatus.PENDING: "dim",
    TaskStatus.RUNNING: "cyan",
    TaskStatus.SUCCEEDED: "green",
    TaskStatus.FAILED: "red",
}


def register_transfer_commands(app: typer.Typer) -> None:
    """Register get, put and drop on the main app"""
    app.command(name="get")(transfer_get)
    app.command(name="put")(transfer_put)
    app.command(name="drop")(transfer_drop)


def transfer_get(
    ctx: typer.Context,
    names: List[str] = typer.Argument(..., help="Entry names in the remote directory"),
    remote_dir: Optional[str] = typer.Option(
        None, "--from", "-f", help="Remote directory (default: last visited)"
    ),
    local_dir: Optional[str] = typer.Option(
        None, "--to", "-t", help="Local destination (default: the local root)"
    ),
):
    """
    Download remote files or directories.

    Examples:
        scpdeck get report.pdf
        scpdeck get logs data.csv --from /var/app --to ./incoming
    """
    dots = [name for name in names if name in DOT_ENTRIES]
    if dots:
        _fail(f"Cannot transfer {', '.join(dots)}")
    services = _services(ctx)

    async def download() -> Optional[TransferBatch]:
        session = services.session
        if remote_dir:
            await session.open_remote(remote_dir)
        else:
            await session.refresh()
        if session.listing_error:
            _fail(session.listing_error)

        by_name = {entry.name: entry for entry in session.items if not entry.is_dot_entry}
        missing = [name for name in names if name not in by_name]
        if missing:
            _fail(f"Not found in {session.current_path}: {', '.join(missing)}")

        _settle_local_root(services, local_dir)
        return await session.download([by_name[name] for name in names])

    _run_transfer(services, download)


def transfer_put(
    ctx: typer.Context,
    paths: List[str] = typer.Argument(..., help="Local files or directories"),
    remote_dir: Optional[str] = typer.Option(
        None, "--to", "-t", help="Remote destination directory (default: last visited)"
    ),
):
    """
    Upload local files or directories.

    Examples:
        scpdeck put build.tar.gz
        scpdeck put ./site --to /srv/www
    """
    services = _services(ctx)
    missing = [path for path in paths if not os.path.exists(path)]
    if missing:
        _fail(f"No such file or directory: {', '.join(missing)}")

    async def upload() -> Optional[TransferBatch]:
        session = services.session
        if remote_dir:
            await session.open_remote(remote_dir)
            if session.listing_error:
                _fail(session.listing_error)
        return await session.upload([os.path.abspath(path) for path in paths])

    _run_transfer(services, upload)


def transfer_drop(
    ctx: typer.Context,
    payload: str = typer.Argument(..., help='Drag payload JSON, or "-" to read it from stdin'),
    remote_dir: Optional[str] = typer.Option(
        None, "--remote", "-r", help="Remote directory (default: last visited)"
    ),
    local_dir: Optional[str] = typer.Option(
        None, "--to", "-t", help="Local destination for remote items (default: the local root)"
    ),
):
    """
    Handle a drag-and-drop payload.

    Remote items ({"items": [...]}) are downloaded; local paths
    ({"paths": [...]}) are uploaded.

    Examples:
        scpdeck drop '{"items": [{"name": "logs", "dir": true}]}'
        echo '{"paths": ["file:///tmp/a.txt"]}' | scpdeck drop -
    """
    services = _services(ctx)
    data = sys.stdin.read() if payload == "-" else payload

    async def dispatch() -> Optional[TransferBatch]:
        session = services.session
        if remote_dir:
            await session.open_remote(remote_dir)
            if session.listing_error:
                _fail(session.listing_error)
        _settle_local_root(services, local_dir)
        return await session.accept_drop(data)

    _run_transfer(services, dispatch)


# --------------------
# Helpers
# --------------------
def _services(ctx: typer.Context) -> Services:
    try:
        services = build_services(ctx.obj)
        services.require_connection()
    except ConfigError as e:
        _fail(str(e))
    return services


def _settle_local_root(services: Services, local_dir: Optional[str]) -> None:
    if local_dir:
        services.session.use_local_root(local_dir)
        return

    def ask(suggested: str) -> Optional[str]:
        return services.prompts.prompt("Local folder for transfers", default=suggested)

    services.session.initialize_local_root(None if services.prompts.assume_yes else ask)


def _run_transfer(services: Services, action: Callable[[], Awaitable[Optional[TransferBatch]]]) -> None:
    show_progress = stdout_console.is_terminal

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TextColumn("[dim]{task.fields[detail]}"),
        console=stdout_console,
        disable=not show_progress,
        transient=True,
    ) as progress:
        tasks: Dict[str, int] = {}

        def on_update(status: TransferItemStatus) -> None:
            task = tasks.get(status.id)
            if task is None:
                task = progress.add_task(status.item.name, total=1, detail="")
                tasks[status.id] = task
            detail = status.progress[-80:] if status.state == TaskStatus.RUNNING else status.state.value
            progress.update(task, detail=detail, completed=1 if status.state.finished else 0)

        services.session.on_update = on_update
        try:
            batch = asyncio.run(action())
        except PayloadError as e:
            _fail(str(e))
        except TransferBusyError as e:
            _fail(str(e))

    if batch is None:
        stdout_console.print("[yellow]Nothing transferred[/yellow]")
        return

    _print_batch(batch)
    report = batch.report()
    if not report.ok:
        stderr_console.print(f"[red]Error:[/red] {report.failed} of {report.total} item(s) failed")
        raise typer.Exit(1)
    stdout_console.print(f"[green]✓[/green] {report.succeeded} item(s) transferred")


def _print_batch(batch: TransferBatch) -> None:
    table = Table(title=batch.direction.value.capitalize(), title_justify="left")
    table.add_column("Name")
    table.add_column("State")
    table.add_column("Message", overflow="fold")
    for status in batch.statuses:
        message = status.message.strip().splitlines()[-1] if status.message.strip() else ""
        table.add_row(
            status.item.name,
            f"[{_STATE_STYLES[status.state]}]{status.state.value}[/]",
            message,
        )
    stdout_console.print(table)


def _fail(message: str) -> None:
    stderr_console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)
