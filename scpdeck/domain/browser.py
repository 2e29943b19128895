"""
Browser session - remote and local panes of one connection

Holds what a front end shows: the current remote directory and its entries,
the local directory under a fixed root, selections on both sides and the
statuses of the last transfer batch.
"""
import os
from typing import Callable, List, Optional, Sequence, Set

from ..core.exceptions import LocalIOError, ScpdeckError
from ..core.logging import get_logger
from ..core.utils import join_remote_path, parent_remote_path, resolve_local_path
from ..infrastructure.state.settings_store import JsonSettingsStore
from .listing import LocalEntry, RemoteBrowser, RemoteEntry, local
from .transfer import TransferBatch, TransferItemStatus, TransferService, decode_drag_payload

logger = get_logger(__name__)

# Called with the suggested local root; returns the chosen folder or None
LocalRootPrompt = Callable[[str], Optional[str]]


class BrowserSession:
    """
    View state for browsing one remote host next to a local folder.

    Listing and transfers are serialized: a refresh requested while one is
    in flight is dropped, and a batch requested while one runs is ignored.
    """

    def __init__(
        self,
        settings: JsonSettingsStore,
        remote: RemoteBrowser,
        transfers: TransferService,
    ):
        self.settings = settings
        self.remote = remote
        self.transfers = transfers

        self.current_path: str = settings.last_remote_path or settings.base_directory
        self.items: List[RemoteEntry] = []
        self.selection: Set[str] = set()
        self.listing_error: Optional[str] = None

        self.local_root: str = settings.last_local_path
        self.local_path: str = self.local_root
        self.local_items: List[LocalEntry] = []
        self.local_selection: Set[str] = set()
        self.local_error: Optional[str] = None
        self._local_scoped = False

        self.is_loading = False
        self.on_update: Optional[Callable[[TransferItemStatus], None]] = None

    @property
    def is_transferring(self) -> bool:
        return self.transfers.is_transferring

    @property
    def transfer_statuses(self) -> List[TransferItemStatus]:
        batch = self.transfers.batch
        return batch.statuses if batch is not None else []

    # --------------------
    # Remote pane
    # --------------------
    async def refresh(self) -> None:
        """Reload the remote listing, then the local one"""
        if self.is_loading:
            logger.debug("Listing already in flight, refresh dropped")
            return

        self.is_loading = True
        try:
            self.items = await self.remote.list_directory(self.settings.identity_context(), self.current_path)
            self.listing_error = None
        except ScpdeckError as e:
            self.items = []
            self.listing_error = str(e)
            logger.warning("Refresh failed: %s", e)
        finally:
            self.is_loading = False

        self.refresh_local()

    async def open_remote(self, path: str) -> None:
        """Jump to path and list it"""
        self._set_remote_path(path)
        await self.refresh()

    async def navigate_into(self, entry: RemoteEntry) -> None:
        if not entry.is_directory:
            return
        self._set_remote_path(join_remote_path(self.current_path, entry.name))
        await self.refresh()

    async def go_up(self) -> None:
        self._set_remote_path(parent_remote_path(self.current_path))
        await self.refresh()

    def toggle_selection(self, name: str) -> None:
        if name in self.selection:
            self.selection.discard(name)
        else:
            self.selection.add(name)

    def _set_remote_path(self, path: str) -> None:
        self.current_path = path
        self.selection.clear()
        self.settings.last_remote_path = path

    # --------------------
    # Local pane
    # --------------------
    def initialize_local_root(self, prompt: Optional[LocalRootPrompt] = None) -> str:
        """
        Settle the local root folder.

        A resolvable bookmark wins. Otherwise the last local path is offered
        to prompt; a chosen folder is bookmarked and remembered.

        Returns:
            The local root in use
        """
        bookmarked = self.settings.bookmarked_local_path()
        if bookmarked:
            root = bookmarked
            self._local_scoped = True
        else:
            suggested = str(resolve_local_path(self.settings.last_local_path))
            chosen = prompt(suggested) if prompt is not None else None
            if chosen:
                self.settings.update_local_access(chosen)
                root = self.settings.last_local_path
                self._local_scoped = self.settings.local_access_bookmark is not None
            else:
                root = suggested
                self._local_scoped = False

        self.local_root = root
        self.local_path = root
        self.local_selection.clear()
        self.refresh_local()
        return root

    def use_local_root(self, path: str) -> str:
        """Use path as the local root for this session without bookmarking it"""
        root = str(resolve_local_path(path))
        self.local_root = root
        self.local_path = root
        self.local_selection.clear()
        self._local_scoped = False
        self.refresh_local()
        return root

    def refresh_local(self) -> None:
        try:
            self.local_items = local.list_directory(self.local_path)
            self.local_error = None
        except LocalIOError as e:
            self.local_items = []
            self.local_error = str(e)
            logger.debug("%s", e)

    def navigate_into_local(self, entry: LocalEntry) -> None:
        if not entry.is_directory:
            return
        self._set_local_path(os.path.join(self.local_path, entry.name))
        self.refresh_local()

    def go_up_local(self) -> None:
        """Move to the parent folder, never above the local root"""
        root = os.path.normpath(self.local_root)
        parent = os.path.dirname(os.path.normpath(self.local_path))
        if parent == root or parent.startswith(root.rstrip(os.sep) + os.sep):
            self._set_local_path(parent)
        else:
            self._set_local_path(root)
        self.refresh_local()

    def toggle_local_selection(self, path: str) -> None:
        if path in self.local_selection:
            self.local_selection.discard(path)
        else:
            self.local_selection.add(path)

    def _set_local_path(self, path: str) -> None:
        self.local_path = path
        self.local_selection.clear()
        self.settings.last_local_path = path

    # --------------------
    # Transfers
    # --------------------
    async def download(self, entries: Sequence[RemoteEntry]) -> Optional[TransferBatch]:
        """
        Copy remote entries of the current remote directory into the local
        folder. The "." and ".." entries are skipped.
        """
        entries = [entry for entry in entries if not entry.is_dot_entry]
        if not entries or self.is_transferring:
            return None
        return await self.transfers.download(
            self.settings.identity_context(),
            entries,
            self.current_path,
            self.local_path,
            on_refresh=self.refresh_local,
            on_update=self.on_update,
            local_scope=self._scope(),
        )

    async def upload(self, paths: Sequence[str]) -> Optional[TransferBatch]:
        """Copy local paths into the current remote directory"""
        if not paths or self.is_transferring:
            return None
        return await self.transfers.upload(
            self.settings.identity_context(),
            paths,
            self.current_path,
            on_refresh=self.refresh,
            on_update=self.on_update,
            local_scope=self._scope(),
        )

    async def transfer_selection(self) -> Optional[TransferBatch]:
        """Download the selected remote entries"""
        selected = [entry for entry in self.items if entry.id in self.selection]
        return await self.download(selected)

    async def accept_drop(self, payload: str) -> Optional[TransferBatch]:
        """
        Handle a drag payload: remote entries download, local paths upload.

        Raises:
            PayloadError: If the payload cannot be decoded
        """
        dropped = decode_drag_payload(payload)
        if dropped.is_remote:
            return await self.download(dropped.entries)
        return await self.upload(dropped.paths)

    def _scope(self) -> Optional[str]:
        return self.local_root if self._local_scoped else None
