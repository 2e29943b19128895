"""
Local directory browsing
"""
import os
from typing import List

from ...core.exceptions import LocalIOError
from .models import LocalEntry


def list_directory(path: str) -> List[LocalEntry]:
    """
    List a local directory, newest first.

    Hidden entries (leading dot) are skipped.

    Raises:
        LocalIOError: If the directory cannot be read
    """
    entries: List[LocalEntry] = []
    try:
        with os.scandir(path) as it:
            for child in it:
                if child.name.startswith("."):
                    continue
                try:
                    is_dir = child.is_dir()
                    modified = child.stat().st_mtime
                except OSError:
                    # vanished or dangling link: still listed, sorted last
                    is_dir = False
                    modified = 0.0
                entries.append(
                    LocalEntry(
                        absolute_path=os.path.abspath(child.path),
                        name=child.name,
                        is_directory=is_dir,
                        modified=modified,
                    )
                )
    except OSError as e:
        raise LocalIOError(f"Cannot list {path}: {e}") from e

    entries.sort(key=lambda e: e.modified, reverse=True)
    return entries


def path_exists(directory: str, name: str) -> bool:
    """Whether name already exists inside directory"""
    return os.path.lexists(os.path.join(directory, name))
