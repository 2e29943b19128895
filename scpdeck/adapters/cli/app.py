"""
Main CLI application
"""
import typer
from pathlib import Path
from typing import Optional

from ...core.constants import APP_NAME
from ...core.logging import setup_logging, get_logger
from .browse import register_browse_commands
from .services import CliOptions
from .settings import register_settings_commands
from .transfer import register_transfer_commands

logger = get_logger(__name__)

# Create main app
app = typer.Typer(
    name=APP_NAME,
    add_completion=False,
    help="Browse a remote host over ssh and copy files with scp",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

register_browse_commands(app)
register_transfer_commands(app)
register_settings_commands(app)


@app.callback()
def main(
    ctx: typer.Context,
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Log file path",
    ),
    ssh_log: Optional[Path] = typer.Option(
        None,
        "--ssh-log",
        help="Write the verbose ssh/scp diagnostics to this file",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file path (TOML, default: ~/.scpdeck/config.toml)",
    ),
    assume_yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Overwrite existing files without asking",
    ),
    server: Optional[str] = typer.Option(
        None, "--server", "-s", help="Remote host for this run"
    ),
    user: Optional[str] = typer.Option(
        None, "--user", "-u", help="Remote username for this run"
    ),
    identity: Optional[Path] = typer.Option(
        None, "--identity", "-i", help="Private key for this run"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds before a remote command is killed"
    ),
):
    """
    scpdeck - browse a remote host and copy files with scp

    Use subcommands to perform different operations:
    - ls / lls: list the remote / local directory
    - get / put: download / upload
    - drop: handle a drag-and-drop payload
    - config, identity: settings and key diagnostics
    """
    # Setup logging
    setup_logging(level=log_level, log_file=log_file, ssh_log_file=ssh_log)

    ctx.obj = CliOptions(
        config_file=config_file,
        assume_yes=assume_yes,
        server=server,
        user=user,
        identity=str(identity) if identity else None,
        timeout=timeout,
    )


def run():
    """CLI entry point"""
    app()


if __name__ == "__main__":
    run()
