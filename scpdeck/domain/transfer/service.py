"""
Transfer service - batch orchestration
"""
import inspect
import os
from typing import Awaitable, Callable, List, Optional, Sequence, Union

from ...core.exceptions import ScpdeckError, TransferBusyError
from ...core.interfaces import BookmarkStore, PromptProvider
from ...core.logging import get_logger
from ...core.utils import join_remote_path, scoped_access
from ..identity import IdentityContext
from ..listing import EntryKind, RemoteEntry
from ..listing.local import path_exists
from ..session import SessionExecutor
from .models import (
    TransferBatch,
    TransferDirection,
    TransferItemStatus,
    TransferTarget,
)

logger = get_logger(__name__)

RefreshCallback = Callable[[], Union[None, Awaitable[None]]]
UpdateCallback = Callable[[TransferItemStatus], None]


class TransferService:
    """
    Transfer service - runs batches of scp copies.

    Items run one after another. A failing item is recorded and the batch
    moves on. After each successful item the destination side is refreshed.
    Before a batch starts, destination names are probed and any collision
    must be confirmed; declining runs nothing.
    """

    def __init__(
        self,
        executor: SessionExecutor,
        confirmation: Optional[PromptProvider] = None,
        bookmarks: Optional[BookmarkStore] = None,
    ):
        """
        Initialize transfer service.

        Args:
            executor: Session executor used for copies and remote probes
            confirmation: Asked before overwriting; without one, collisions abort
            bookmarks: Grants access to a bookmarked local root during copies
        """
        self.executor = executor
        self.confirmation = confirmation
        self.bookmarks = bookmarks
        self.batch: Optional[TransferBatch] = None
        self._busy = False

    @property
    def is_transferring(self) -> bool:
        return self._busy

    # --------------------
    # Public operations
    # --------------------
    async def download(
        self,
        context: IdentityContext,
        entries: Sequence[RemoteEntry],
        remote_dir: str,
        local_dir: str,
        on_refresh: Optional[RefreshCallback] = None,
        on_update: Optional[UpdateCallback] = None,
        local_scope: Optional[str] = None,
    ) -> Optional[TransferBatch]:
        """
        Copy remote entries of remote_dir into local_dir.

        Returns the finished batch, or None when there was nothing to do or
        the overwrite prompt was declined.

        Raises:
            TransferBusyError: If another batch is running
        """
        if not entries:
            return None

        targets = [
            TransferTarget(entry=entry, source=join_remote_path(remote_dir, entry.name))
            for entry in entries
        ]

        async def copy_one(target: TransferTarget, status: TransferItemStatus) -> None:
            with scoped_access(self.bookmarks, local_scope):
                await self.executor.copy_from_remote(
                    context,
                    target.source,
                    target.entry.is_directory,
                    local_dir,
                    on_progress=self._progress_handler(status, on_update),
                )

        with self._reserve():
            collisions = [entry.name for entry in entries if path_exists(local_dir, entry.name)]
            if not self._confirm_overwrite(collisions, local_dir):
                return None
            return await self._run_batch(TransferDirection.DOWNLOAD, targets, copy_one, on_refresh, on_update)

    async def upload(
        self,
        context: IdentityContext,
        local_paths: Sequence[str],
        remote_dir: str,
        on_refresh: Optional[RefreshCallback] = None,
        on_update: Optional[UpdateCallback] = None,
        local_scope: Optional[str] = None,
    ) -> Optional[TransferBatch]:
        """
        Copy local files or directories into remote_dir.

        Returns the finished batch, or None when there was nothing to do or
        the overwrite prompt was declined.

        Raises:
            TransferBusyError: If another batch is running
        """
        if not local_paths:
            return None

        targets = [self._local_target(path) for path in local_paths]

        async def copy_one(target: TransferTarget, status: TransferItemStatus) -> None:
            with scoped_access(self.bookmarks, local_scope):
                await self.executor.copy_to_remote(
                    context,
                    target.source,
                    target.entry.is_directory,
                    remote_dir,
                    on_progress=self._progress_handler(status, on_update),
                )

        with self._reserve():
            collisions: List[str] = []
            for target in targets:
                candidate = join_remote_path(remote_dir, target.entry.name)
                if await self.executor.remote_path_exists(context, candidate):
                    collisions.append(target.entry.name)
            if not self._confirm_overwrite(collisions, remote_dir):
                return None
            return await self._run_batch(TransferDirection.UPLOAD, targets, copy_one, on_refresh, on_update)

    # --------------------
    # Batch execution
    # --------------------
    async def _run_batch(
        self,
        direction: TransferDirection,
        targets: Sequence[TransferTarget],
        copy_one: Callable[[TransferTarget, TransferItemStatus], Awaitable[None]],
        on_refresh: Optional[RefreshCallback],
        on_update: Optional[UpdateCallback],
    ) -> TransferBatch:
        batch = TransferBatch(direction, targets)
        self.batch = batch
        logger.info("Starting %s of %d item(s)", direction.value, len(batch))

        for target, status in batch:
            status.start()
            self._notify(on_update, status)
            try:
                await copy_one(target, status)
            except (ScpdeckError, OSError) as e:
                status.fail(str(e))
                logger.warning("Transfer of %s failed: %s", target.entry.name, _last_line(str(e)))
                self._notify(on_update, status)
                continue

            status.succeed()
            logger.info("Transferred %s", target.entry.name)
            self._notify(on_update, status)
            if on_refresh is not None:
                await _maybe_await(on_refresh())

        report = batch.report()
        logger.info(
            "Finished %s: %d succeeded, %d failed",
            direction.value,
            report.succeeded,
            report.failed,
        )
        return batch

    def _confirm_overwrite(self, names: Sequence[str], location: str) -> bool:
        if not names:
            return True
        if self.confirmation is None:
            logger.warning("%s already exist in %s; no confirmation available", ", ".join(names), location)
            return False

        noun = "File exists" if len(names) == 1 else "Files exist"
        message = f"{noun}: {', '.join(names)} already exist in {location}. Overwrite?"
        if self.confirmation.confirm(message, default=False):
            return True
        logger.info("Overwrite declined, batch aborted")
        return False

    def _reserve(self) -> "_BusyGuard":
        if self._busy:
            raise TransferBusyError("A transfer is already running")
        return _BusyGuard(self)

    @staticmethod
    def _local_target(path: str) -> TransferTarget:
        name = os.path.basename(path.rstrip(os.sep)) or path
        kind = EntryKind.DIRECTORY if os.path.isdir(path) else EntryKind.FILE
        return TransferTarget(entry=RemoteEntry(name=name, kind=kind), source=path)

    def _progress_handler(self, status: TransferItemStatus, on_update: Optional[UpdateCallback]) -> Callable[[str], None]:
        def handle(chunk: str) -> None:
            status.note_progress(chunk)
            self._notify(on_update, status)
        return handle

    @staticmethod
    def _notify(on_update: Optional[UpdateCallback], status: TransferItemStatus) -> None:
        if on_update is not None:
            on_update(status)


class _BusyGuard:
    """Holds the transfer-in-progress flag for one batch"""

    def __init__(self, service: TransferService):
        self.service = service

    def __enter__(self) -> "_BusyGuard":
        self.service._busy = True
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.service._busy = False


async def _maybe_await(value: Union[None, Awaitable[None]]) -> None:
    if inspect.isawaitable(value):
        await value


def _last_line(text: str) -> str:
    return text.strip().splitlines()[-1] if text.strip() else text
