"""
File-based bookmark storage implementation
"""
import base64
import binascii
import json
import os
from collections import Counter
from typing import Optional, Tuple

from ...core.exceptions import LocalIOError
from ...core.interfaces import BookmarkStore
from ...core.logging import get_logger

logger = get_logger(__name__)


class FileBookmarkStore(BookmarkStore):
    """
    Bookmarks pinned to a file's identity.

    A token records the absolute path with the device and inode it had when
    saved. It resolves while the path exists, and is stale once the path
    points at a different file (replaced or recreated).
    Access grants are reference counted per path.
    """

    def __init__(self):
        self._active: Counter = Counter()

    def save(self, path: str) -> str:
        absolute = os.path.abspath(os.path.expanduser(path))
        try:
            st = os.stat(absolute)
        except OSError as e:
            raise LocalIOError(f"Cannot bookmark {absolute}: {e}") from e

        record = {"path": absolute, "dev": st.st_dev, "ino": st.st_ino}
        return base64.urlsafe_b64encode(json.dumps(record).encode("utf-8")).decode("ascii")

    def resolve(self, token: str) -> Optional[Tuple[str, bool]]:
        try:
            record = json.loads(base64.urlsafe_b64decode(token.encode("ascii")))
            path = record["path"]
        except (binascii.Error, ValueError, KeyError, TypeError):
            logger.debug("Discarding malformed bookmark token")
            return None

        try:
            st = os.stat(path)
        except OSError:
            return None

        is_stale = (st.st_dev, st.st_ino) != (record.get("dev"), record.get("ino"))
        return path, is_stale

    def start_access(self, path: str) -> bool:
        if not os.access(path, os.R_OK):
            return False
        self._active[path] += 1
        return True

    def stop_access(self, path: str) -> None:
        if self._active[path] <= 1:
            self._active.pop(path, None)
        else:
            self._active[path] -= 1

    def active_count(self, path: str) -> int:
        """Number of unreleased grants for path"""
        return self._active.get(path, 0)
