"""
Core utility functions
"""
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .constants import PUBLIC_KEY_SUFFIX, REMOTE_SEPARATOR
from .interfaces import BookmarkStore
from .logging import get_logger

logger = get_logger(__name__)


# ============================================================
# Remote Path Utilities
# ============================================================

def join_remote_path(directory: str, name: str) -> str:
    """
    Append name to a remote directory with exactly one separator.

    Remote paths are plain strings; "~" and relative paths are left alone.
    """
    if directory.endswith(REMOTE_SEPARATOR):
        return directory + name
    return directory + REMOTE_SEPARATOR + name


def ensure_trailing_separator(directory: str) -> str:
    """Return directory ending with exactly one separator"""
    if directory.endswith(REMOTE_SEPARATOR):
        return directory
    return directory + REMOTE_SEPARATOR


def parent_remote_path(path: str) -> str:
    """
    Drop the last component of a remote path.

    "/srv/data/" -> "/srv", "/srv" -> "/", "~/a" -> "~", "~" -> "~"
    """
    if path == REMOTE_SEPARATOR:
        return path
    trimmed = path[:-1] if path.endswith(REMOTE_SEPARATOR) else path
    index = trimmed.rfind(REMOTE_SEPARATOR)
    if index < 0:
        return path
    if index == 0:
        return REMOTE_SEPARATOR
    return trimmed[:index]


def shell_quote(value: str) -> str:
    """Wrap value in single quotes for a POSIX shell"""
    return "'" + value.replace("'", "'\\''") + "'"


def format_ssh_target(username: str, server: str) -> str:
    """Format SSH target as user@host"""
    return f"{username}@{server}" if username else server


# ============================================================
# Local Path Utilities
# ============================================================

def strip_public_key_suffix(path: str) -> str:
    """Turn a public key path into the matching private key path"""
    if path.endswith(PUBLIC_KEY_SUFFIX):
        return path[:-len(PUBLIC_KEY_SUFFIX)]
    return path


def resolve_local_path(path: str) -> Path:
    """Resolve local path, expand ~ and other symbols"""
    return Path(os.path.expandvars(path)).expanduser()


# ============================================================
# Scoped Access
# ============================================================

@contextmanager
def scoped_access(store: Optional[BookmarkStore], path: Optional[str]) -> Iterator[bool]:
    """
    Hold scoped access to a bookmarked path for the duration of the block.

    Access is released on every exit path. Yields whether access was granted.
    """
    if store is None or not path:
        yield False
        return

    granted = store.start_access(path)
    if not granted:
        logger.debug("Scoped access to %s was not granted", path)
    try:
        yield granted
    finally:
        if granted:
            store.stop_access(path)
