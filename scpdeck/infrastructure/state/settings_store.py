"""
JSON-file settings storage

Connection settings and last used paths live in a JSON document; the
key passphrase goes to the credential store instead.
"""
import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ...core.constants import (
    DEFAULT_BASE_DIRECTORY,
    DEFAULT_LOCAL_DIR,
    DEFAULT_REMOTE_PATH,
    KEYRING_SERVICE,
    SETTINGS_PATH,
)
from ...core.exceptions import CredentialStoreError, LocalIOError
from ...core.interfaces import BookmarkStore, CredentialStore
from ...core.logging import get_logger
from ...core.utils import resolve_local_path, strip_public_key_suffix
from ...domain.identity import IdentityContext

logger = get_logger(__name__)

SettingsObserver = Callable[[str, Any], None]

# Fields written to settings.json, with defaults
PERSISTED_DEFAULTS: Dict[str, Any] = {
    "server_address": "",
    "username": "",
    "base_directory": DEFAULT_BASE_DIRECTORY,
    "identity_key_path": None,
    "identity_key_bookmark": None,
    "last_local_path": str(resolve_local_path(DEFAULT_LOCAL_DIR)),
    "last_remote_path": DEFAULT_REMOTE_PATH,
    "local_access_bookmark": None,
}

# Fields that together key the stored passphrase
ACCOUNT_FIELDS = frozenset({"server_address", "username"})


class _Setting:
    """Attribute that reads from and writes through the owning store"""

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self
        return obj._values[self.name]

    def __set__(self, obj, value):
        obj.set(self.name, value)


class JsonSettingsStore:
    """
    Observable settings persisted to a JSON file.

    Every assignment is written immediately and announced to subscribers as
    (field, value). Values applied with apply_overrides() are visible for
    the current run only.
    """

    server_address = _Setting()
    username = _Setting()
    base_directory = _Setting()
    passphrase = _Setting()
    identity_key_path = _Setting()
    identity_key_bookmark = _Setting()
    last_local_path = _Setting()
    last_remote_path = _Setting()
    local_access_bookmark = _Setting()

    def __init__(
        self,
        path: Optional[Path] = None,
        credentials: Optional[CredentialStore] = None,
        bookmarks: Optional[BookmarkStore] = None,
    ):
        """
        Initialize settings store.

        Args:
            path: Settings file (default ~/.scpdeck/settings.json)
            credentials: Where the passphrase is kept; without one it is memory-only
            bookmarks: Used to pin the identity key and local root
        """
        self.path = Path(path).expanduser() if path else resolve_local_path(SETTINGS_PATH)
        self.credentials = credentials
        self.bookmarks = bookmarks
        self._subscribers: List[SettingsObserver] = []
        self._persisted: Dict[str, Any] = dict(PERSISTED_DEFAULTS)
        self._persisted.update(self._read())
        self._values: Dict[str, Any] = dict(self._persisted)
        self._values["passphrase"] = self._load_passphrase()

    # --------------------
    # Observation
    # --------------------
    def subscribe(self, observer: SettingsObserver) -> Callable[[], None]:
        """Register observer; returns a function that unregisters it"""
        self._subscribers.append(observer)

        def unsubscribe() -> None:
            if observer in self._subscribers:
                self._subscribers.remove(observer)

        return unsubscribe

    def _notify(self, name: str, value: Any) -> None:
        for observer in list(self._subscribers):
            observer(name, value)

    # --------------------
    # Reading and writing
    # --------------------
    def set(self, name: str, value: Any) -> None:
        """
        Assign a field, persist it and notify subscribers.

        Changing the username or server switches to that account's passphrase.
        """
        if name not in PERSISTED_DEFAULTS and name != "passphrase":
            raise AttributeError(f"Unknown setting: {name}")

        changed = self._values[name] != value
        self._values[name] = value
        if name == "passphrase":
            self._store_passphrase(value)
        else:
            self._persisted[name] = value
            self._write()
        self._notify(name, value)
        if changed and name in ACCOUNT_FIELDS:
            self.reload_passphrase()

    def apply_overrides(self, overrides: Dict[str, Any]) -> None:
        """Apply values for this run only; unknown keys are ignored"""
        applied = {name: value for name, value in overrides.items() if name in PERSISTED_DEFAULTS}
        for name, value in applied.items():
            self._values[name] = value
            self._notify(name, value)
        if ACCOUNT_FIELDS.intersection(applied):
            self.reload_passphrase()

    def as_dict(self) -> Dict[str, Any]:
        """Current values, passphrase masked"""
        data = {name: self._values[name] for name in PERSISTED_DEFAULTS}
        data["passphrase"] = "********" if self._values["passphrase"] else ""
        return data

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed settings file %s", self.path)
            return {}
        return {key: value for key, value in data.items() if key in PERSISTED_DEFAULTS}

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._persisted, indent=2), encoding='utf-8')

    # --------------------
    # Passphrase
    # --------------------
    @property
    def account_key(self) -> str:
        return f"{self._values['username']}@{self._values['server_address']}"

    def _load_passphrase(self) -> str:
        if self.credentials is None:
            return ""
        try:
            return self.credentials.get_password(KEYRING_SERVICE, self.account_key) or ""
        except CredentialStoreError as e:
            logger.warning("%s", e)
            return ""

    def _store_passphrase(self, value: str) -> None:
        if self.credentials is None:
            return
        try:
            if value:
                self.credentials.set_password(KEYRING_SERVICE, self.account_key, value)
            else:
                self.credentials.delete_password(KEYRING_SERVICE, self.account_key)
        except CredentialStoreError as e:
            logger.warning("%s", e)

    def reload_passphrase(self) -> str:
        """Re-read the passphrase for the current user@server"""
        value = self._load_passphrase()
        self._values["passphrase"] = value
        self._notify("passphrase", value)
        return value

    # --------------------
    # Identity key and local root
    # --------------------
    def update_identity_key(self, path: str) -> None:
        """Point at a private key; a .pub path is replaced by its private key"""
        private_path = strip_public_key_suffix(str(resolve_local_path(path)))
        self.identity_key_path = private_path
        self.identity_key_bookmark = self._bookmark(private_path)

    def clear_identity_key(self) -> None:
        self.identity_key_path = None
        self.identity_key_bookmark = None

    def update_local_access(self, path: str) -> None:
        """Remember path as the local root and bookmark it"""
        local_path = str(resolve_local_path(path))
        self.local_access_bookmark = self._bookmark(local_path)
        self.last_local_path = local_path

    def bookmarked_local_path(self) -> Optional[str]:
        """Local root from its bookmark, or None if it no longer resolves"""
        token = self.local_access_bookmark
        if not token or self.bookmarks is None:
            return None
        resolved = self.bookmarks.resolve(token)
        if resolved is None:
            return None
        path, is_stale = resolved
        if is_stale:
            logger.warning("Local folder bookmark is stale: %s", path)
        return path

    def _bookmark(self, path: str) -> Optional[str]:
        if self.bookmarks is None:
            return None
        try:
            return self.bookmarks.save(path)
        except LocalIOError as e:
            logger.warning("%s", e)
            return None

    def identity_context(self) -> IdentityContext:
        """Snapshot of the connection credentials"""
        return IdentityContext(
            server_address=self._values["server_address"],
            username=self._values["username"],
            passphrase=self._values["passphrase"],
            identity_key_path=self._values["identity_key_path"],
            identity_key_bookmark=self._values["identity_key_bookmark"],
        )
