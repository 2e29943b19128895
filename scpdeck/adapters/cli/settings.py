"""
Settings and identity CLI commands
"""
import asyncio
from typing import Optional

import typer
from rich.table import Table

from ...core.constants import SSH_AUTH_SOCK
from ...core.exceptions import ConfigError
from ...core.logging import get_logger, get_stdout_console, get_stderr_console
from ...domain.identity import inspect_identity
from .services import Services, build_services

logger = get_logger(__name__)
stdout_console = get_stdout_console()
stderr_console = get_stderr_console()

# Accepted names for `config set`, mapped to settings fields
SETTABLE_KEYS = {
    "server": "server_address",
    "server_address": "server_address",
    "user": "username",
    "username": "username",
    "base_dir": "base_directory",
    "base_directory": "base_directory",
    "identity": "identity_key_path",
    "identity_key_path": "identity_key_path",
    "local_dir": "last_local_path",
    "last_local_path": "last_local_path",
    "passphrase": "passphrase",
}


def register_settings_commands(app: typer.Typer) -> None:
    """Register the config sub-app and the identity command"""
    config_app = typer.Typer(
        name="config",
        help="Show or change persisted settings",
        add_completion=False,
        no_args_is_help=True,
    )
    config_app.command(name="show")(config_show)
    config_app.command(name="set")(config_set)

    app.add_typer(config_app, name="config")
    app.command(name="identity")(identity_show)


def config_show(ctx: typer.Context):
    """Show current settings (command line and environment overrides included)"""
    services = _services(ctx)

    table = Table(title=str(services.settings.path), title_justify="left")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in services.settings.as_dict().items():
        if name.endswith("_bookmark"):
            value = "set" if value else None
        table.add_row(name, "" if value is None else str(value))
    stdout_console.print(table)


def config_set(
    ctx: typer.Context,
    key: str = typer.Argument(..., help=f"One of: {', '.join(sorted(set(SETTABLE_KEYS.values())))}"),
    value: Optional[str] = typer.Argument(
        None, help="New value; omit for passphrase to be prompted, empty string to clear"
    ),
):
    """
    Change a persisted setting.

    Examples:
        scpdeck config set server files.example.com
        scpdeck config set identity ~/.ssh/id_ed25519.pub
        scpdeck config set passphrase
    """
    field = SETTABLE_KEYS.get(key)
    if field is None:
        _fail(f"Unknown setting: {key}")

    services = _services(ctx)
    settings = services.settings

    if field == "passphrase":
        if value is None:
            value = services.prompts.prompt(f"Passphrase for {settings.account_key}", password=True)
        settings.passphrase = value
    elif value is None:
        _fail(f"A value is required for {key}")
    elif field == "identity_key_path":
        if value:
            settings.update_identity_key(value)
        else:
            settings.clear_identity_key()
    elif field == "last_local_path":
        settings.update_local_access(value)
    else:
        settings.set(field, value)

    services.prompts.success(f"{field} updated")


def identity_show(ctx: typer.Context):
    """
    Show which private key ssh and scp will use, and what it contains.
    """
    services = _services(ctx)
    context = services.settings.identity_context()
    resolved = services.resolver.resolve(context)
    agent_socket = asyncio.run(services.executor.agent.environment()).get(SSH_AUTH_SOCK)

    table = Table(show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Account", context.account_key)
    table.add_row("Source", resolved.source.value)
    table.add_row("Key", resolved.path or "(none)")
    table.add_row("Agent socket", agent_socket or "(not found)")

    if resolved.path:
        table.add_row("Stable copy", str(services.resolver.stable_path_for(resolved.path)))
        info = inspect_identity(resolved.path, context.passphrase or None)
        if info.readable:
            table.add_row("Type", info.key_type or "?")
            table.add_row("Fingerprint", info.fingerprint or "?")
            table.add_row("Encrypted", "yes" if info.encrypted else "no")
        else:
            table.add_row("Problem", f"[red]{info.error}[/red]")

    stdout_console.print(table)


def _services(ctx: typer.Context) -> Services:
    try:
        return build_services(ctx.obj)
    except ConfigError as e:
        _fail(str(e))


def _fail(message: str) -> None:
    stderr_console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)
