"""
Rich-based logging system
"""
import sys
import logging
from typing import Optional
from pathlib import Path

from rich.logging import RichHandler
from rich.console import Console
from rich.traceback import install as install_traceback


# Logger receiving the verbose ssh/scp diagnostic stream
SSH_LOGGER_NAME = "scpdeck.ssh"

_stdout_console = Console(file=sys.stdout)
_stderr_console = Console(file=sys.stderr)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    ssh_log_file: Optional[Path] = None,
    rich_tracebacks: bool = True,
) -> None:
    """
    Setup Rich logging system.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        ssh_log_file: Optional file receiving the raw ssh/scp -vvv output
        rich_tracebacks: Enable rich tracebacks
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    if rich_tracebacks:
        install_traceback(console=_stderr_console, width=120)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    rich_handler = RichHandler(
        console=_stderr_console,
        show_time=True,
        show_path=False,
        rich_tracebacks=rich_tracebacks,
        markup=False,
        show_level=True,
    )
    rich_handler.setLevel(log_level)
    root_logger.addHandler(rich_handler)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # ssh diagnostics are noisy: keep them off the console unless DEBUG,
    # and send them to their own file when asked.
    ssh_logger = logging.getLogger(SSH_LOGGER_NAME)
    ssh_logger.handlers.clear()
    if ssh_log_file:
        ssh_log_file.parent.mkdir(parents=True, exist_ok=True)
        ssh_handler = logging.FileHandler(ssh_log_file, encoding='utf-8')
        ssh_handler.setLevel(logging.DEBUG)
        ssh_handler.setFormatter(logging.Formatter('%(asctime)s %(message)s'))
        ssh_logger.addHandler(ssh_handler)
        ssh_logger.setLevel(logging.DEBUG)
        ssh_logger.propagate = log_level <= logging.DEBUG
    else:
        ssh_logger.setLevel(logging.NOTSET)
        ssh_logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    """
    Get logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def get_ssh_logger() -> logging.Logger:
    """Get the logger for raw ssh/scp diagnostics"""
    return logging.getLogger(SSH_LOGGER_NAME)


def get_stdout_console() -> Console:
    """Get stdout console for user-facing output"""
    return _stdout_console


def get_stderr_console() -> Console:
    """Get stderr console for errors and logs"""
    return _stderr_console
