"""
Remote listing parser

Turns ``ls -laF --group-directories-first`` output into RemoteEntry objects.
"""
from typing import Iterable, List, Optional

from ...core.constants import (
    HOME_SHORTHAND,
    LISTING_COMMAND,
    LISTING_MIN_FIELDS,
    LISTING_TOTAL_MARKER,
    REMOTE_SEPARATOR,
)
from ...core.logging import get_logger
from ...core.utils import shell_quote
from .models import EntryKind, RemoteEntry

logger = get_logger(__name__)

SYMLINK_ARROW = " -> "


def classify(permissions: str, name_with_marker: str) -> tuple[str, EntryKind]:
    """
    Split the -F type marker off a name and decide the entry kind.

    "/" marks a directory. "@" marks a symlink, trusted only when the
    permission string agrees. Without a marker the permission string decides.
    """
    if name_with_marker.endswith("/"):
        return name_with_marker[:-1], EntryKind.DIRECTORY
    if name_with_marker.endswith("@"):
        kind = EntryKind.SYMLINK if permissions.startswith("l") else EntryKind.FILE
        return name_with_marker[:-1], kind

    if permissions.startswith("d"):
        return name_with_marker, EntryKind.DIRECTORY
    if permissions.startswith("l"):
        return name_with_marker, EntryKind.SYMLINK
    return name_with_marker, EntryKind.FILE


def parse_line(line: str) -> Optional[RemoteEntry]:
    """Parse one listing line, None when it is not an entry"""
    line = line.strip()
    if not line or line.startswith(LISTING_TOTAL_MARKER):
        return None

    fields = line.split()
    if len(fields) < LISTING_MIN_FIELDS:
        logger.debug("Skipping unparseable listing line: %r", line)
        return None

    # permissions + 7 metadata columns, then the name (which may contain spaces)
    permissions = fields[0]
    name_field = " ".join(fields[LISTING_MIN_FIELDS - 1:])
    # the marker at the very end decides the kind, "current -> releases/7/" is a directory
    _, kind = classify(permissions, name_field)
    name_with_marker = name_field
    if permissions.startswith("l") and SYMLINK_ARROW in name_field:
        # long format prints "name -> target" for links
        name_with_marker = name_field.split(SYMLINK_ARROW, 1)[0]
    name, _ = classify(permissions, name_with_marker)
    return RemoteEntry(name=name, kind=kind)


def sort_entries(entries: Iterable[RemoteEntry]) -> List[RemoteEntry]:
    """Directories first, then case-insensitive by name"""
    return sorted(entries, key=lambda e: (not e.is_directory, e.name.casefold()))


def parse_listing(output: str) -> List[RemoteEntry]:
    """
    Parse a long-format listing.

    Blank lines, the "total" line and lines with fewer than nine fields are
    dropped silently.
    """
    entries = [entry for entry in map(parse_line, output.splitlines()) if entry is not None]
    return sort_entries(entries)


def build_listing_command(path: str) -> str:
    """
    Remote command listing path.

    "~" and "~/..." are listed from the home directory since a quoted
    argument never gets tilde expansion.
    """
    if path == HOME_SHORTHAND or path.startswith(HOME_SHORTHAND + REMOTE_SEPARATOR):
        suffix = path[len(HOME_SHORTHAND):].lstrip(REMOTE_SEPARATOR)
        target = suffix or "."
        return f"cd ~ && {LISTING_COMMAND} {shell_quote(target)} 2>/dev/null"
    return f"{LISTING_COMMAND} {shell_quote(path)} 2>/dev/null"
