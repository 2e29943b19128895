"""
SSH identity resolution

Picks the private key handed to ssh/scp and keeps a stable copy of it so
that agent/keychain integrations that remember passphrases per file path
keep working across runs.
"""
import logging
import os
import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

from ...core.constants import FALLBACK_IDENTITIES, KEY_FILE_MODE, KEYS_DIR, SSH_DIR
from ...core.exceptions import KeyCopyError
from ...core.interfaces import BookmarkStore
from ...core.logging import get_logger
from ...core.utils import resolve_local_path, scoped_access, strip_public_key_suffix
from .keys import inspect_identity
from .models import IdentityContext, IdentitySource, ResolvedIdentity

logger = get_logger(__name__)


class IdentityResolver:
    """
    Resolve which private key authenticates a session.

    Priority:
    1. bookmarked key (needs scoped access while in use)
    2. configured key path
    3. first existing fallback key under the SSH directory
    4. none, leaving authentication to the agent

    A trailing ".pub" is always replaced by the private key path.
    """

    def __init__(
        self,
        bookmarks: Optional[BookmarkStore] = None,
        keys_dir: Optional[Path] = None,
        ssh_dir: Optional[Path] = None,
        fallback_names: Sequence[str] = FALLBACK_IDENTITIES,
    ):
        self.bookmarks = bookmarks
        self.keys_dir = Path(keys_dir) if keys_dir else resolve_local_path(KEYS_DIR)
        self.ssh_dir = Path(ssh_dir) if ssh_dir else resolve_local_path(SSH_DIR)
        self.fallback_names = tuple(fallback_names)

    # --------------------
    # Resolution
    # --------------------
    def resolve(self, context: IdentityContext) -> ResolvedIdentity:
        """Apply the priority rules without touching the filesystem beyond existence probes"""
        bookmarked = self._resolve_bookmark(context.identity_key_bookmark)
        if bookmarked:
            path = strip_public_key_suffix(bookmarked)
            return ResolvedIdentity(path=path, source=IdentitySource.BOOKMARK, scoped_path=bookmarked)

        configured = (context.identity_key_path or "").strip()
        if configured:
            path = strip_public_key_suffix(str(resolve_local_path(configured)))
            return ResolvedIdentity(path=path, source=IdentitySource.CONFIGURED)

        for name in self.fallback_names:
            candidate = self.ssh_dir / name
            if candidate.exists():
                return ResolvedIdentity(path=str(candidate), source=IdentitySource.FALLBACK)

        return ResolvedIdentity(path=None, source=IdentitySource.AGENT)

    def _resolve_bookmark(self, token: Optional[str]) -> Optional[str]:
        if not token or self.bookmarks is None:
            return None

        resolved = self.bookmarks.resolve(token)
        if resolved is None:
            logger.warning("Identity key bookmark no longer resolves, ignoring it")
            return None

        path, is_stale = resolved
        if is_stale:
            logger.warning("Identity key bookmark for %s is stale", path)
        return path

    @contextmanager
    def acquire(self, context: IdentityContext) -> Iterator[ResolvedIdentity]:
        """
        Resolve the identity and hold it ready for one subprocess run.

        Scoped access to a bookmarked key is released when the block exits,
        whether it raised or not.
        """
        resolved = self.resolve(context)
        with scoped_access(self.bookmarks, resolved.scoped_path):
            if resolved.path:
                if logger.isEnabledFor(logging.DEBUG):
                    info = inspect_identity(resolved.path, context.passphrase or None)
                    logger.debug(
                        "Identity %s (%s): type=%s encrypted=%s %s",
                        resolved.path,
                        resolved.source.value,
                        info.key_type,
                        info.encrypted,
                        info.error or "",
                    )
                resolved = resolved.with_child_path(self.stabilize(resolved.path))
            else:
                logger.debug("No identity key found, relying on ssh-agent")
            yield resolved

    # --------------------
    # Stable copy
    # --------------------
    def stable_path_for(self, path: str) -> Path:
        """Location of the cached copy, keyed by original file name"""
        return self.keys_dir / Path(path).name

    def stabilize(self, path: str) -> str:
        """
        Return the stable copy of path, refreshing it when the source changed.

        Falls back to the original path if the copy cannot be made.
        """
        target = self.stable_path_for(path)
        try:
            if self._needs_copy(Path(path), target):
                self._copy_key(Path(path), target)
            return str(target)
        except KeyCopyError as e:
            logger.warning("%s; using %s directly", e, path)
            return path

    @staticmethod
    def _needs_copy(source: Path, target: Path) -> bool:
        try:
            src_stat = source.stat()
            dst_stat = target.stat()
        except OSError:
            return True
        return src_stat.st_size != dst_stat.st_size or src_stat.st_mtime > dst_stat.st_mtime

    def _copy_key(self, source: Path, target: Path) -> None:
        temp = target.with_name(f".{target.name}.tmp")
        try:
            self.keys_dir.mkdir(parents=True, exist_ok=True)
            os.chmod(self.keys_dir, 0o700)
            shutil.copyfile(source, temp)
            os.chmod(temp, KEY_FILE_MODE)
            os.replace(temp, target)
        except OSError as e:
            try:
                temp.unlink()
            except OSError:
                pass
            raise KeyCopyError(f"Failed to copy identity {source} to {target}: {e}") from e
        logger.debug("Copied identity %s to %s", source, target)
