"""
Core infrastructure layer
"""
from .constants import *
from .exceptions import *
from .logging import setup_logging, get_logger, get_ssh_logger, get_stdout_console, get_stderr_console
from .interfaces import CredentialStore, BookmarkStore, PromptProvider
from .utils import (
    join_remote_path,
    parent_remote_path,
    shell_quote,
    resolve_local_path,
    scoped_access,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "get_ssh_logger",
    "get_stdout_console",
    "get_stderr_console",
    "CredentialStore",
    "BookmarkStore",
    "PromptProvider",
    "join_remote_path",
    "parent_remote_path",
    "shell_quote",
    "resolve_local_path",
    "scoped_access",
]
