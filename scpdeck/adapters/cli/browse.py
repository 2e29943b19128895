"""
Browse CLI commands
"""
import asyncio
from datetime import datetime
from typing import Optional

import typer
from rich.table import Table

from ...core.exceptions import ConfigError, LocalIOError
from ...core.logging import get_logger, get_stdout_console, get_stderr_console
from ...domain.listing import EntryKind, local
from .services import build_services

logger = get_logger(__name__)
stdout_console = get_stdout_console()
stderr_console = get_stderr_console()

_KIND_STYLES = {
    EntryKind.DIRECTORY: "bold blue",
    EntryKind.SYMLINK: "cyan",
    EntryKind.FILE: "",
    EntryKind.OTHER: "magenta",
}


def register_browse_commands(app: typer.Typer) -> None:
    """Register ls and lls on the main app"""
    app.command(name="ls")(remote_list)
    app.command(name="lls")(local_list)


def remote_list(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(
        None, help="Remote directory (default: last visited, or the base directory)"
    ),
):
    """
    List a remote directory.

    Directories come first, then files, each group sorted by name.

    Examples:
        scpdeck ls
        scpdeck ls /var/log
        scpdeck ls "~/projects"
    """
    try:
        services = build_services(ctx.obj)
        services.require_connection()
    except ConfigError as e:
        stderr_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    session = services.session
    if path:
        asyncio.run(session.open_remote(path))
    else:
        asyncio.run(session.refresh())

    if session.listing_error:
        stderr_console.print(f"[red]Error:[/red] {session.listing_error}")
        raise typer.Exit(1)

    entries = [entry for entry in session.items if not entry.is_dot_entry]
    table = Table(title=f"{services.settings.server_address}:{session.current_path}", title_justify="left")
    table.add_column("Name")
    table.add_column("Kind", style="dim")
    for entry in entries:
        name = entry.name + ("/" if entry.is_directory else "")
        table.add_row(name, entry.kind.value, style=_KIND_STYLES[entry.kind])
    stdout_console.print(table)

    if not entries:
        stdout_console.print("[dim](empty)[/dim]")


def local_list(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(
        None, help="Local directory (default: the local root)"
    ),
):
    """
    List a local directory, newest first. Hidden entries are skipped.
    """
    try:
        services = build_services(ctx.obj)
    except ConfigError as e:
        stderr_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    directory = path or services.session.initialize_local_root()
    try:
        entries = local.list_directory(directory)
    except LocalIOError as e:
        stderr_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title=directory, title_justify="left")
    table.add_column("Name")
    table.add_column("Modified", style="dim")
    for entry in entries:
        name = entry.name + ("/" if entry.is_directory else "")
        modified = datetime.fromtimestamp(entry.modified).strftime("%Y-%m-%d %H:%M") if entry.modified else "?"
        table.add_row(name, modified, style="bold blue" if entry.is_directory else "")
    stdout_console.print(table)
