"""
scpdeck - remote file browser over ssh and scp

Provides a small toolkit for working with one remote host through the
OpenSSH executables:
- Remote directory listing (parsed `ls -laF` output)
- Downloads and uploads with scp, tracked per item
- Identity key resolution with a stable on-disk copy
- Drag-and-drop payload handling
"""

__version__ = "0.1.0"

# Export core components
from .core import ScpdeckError, setup_logging

# Export domain models
from .domain.identity import IdentityContext, IdentityResolver
from .domain.session import SessionExecutor, SessionResult, AsyncProcessRunner
from .domain.listing import EntryKind, RemoteEntry, LocalEntry, RemoteBrowser
from .domain.transfer import (
    TaskStatus,
    TransferItemStatus,
    TransferBatch,
    TransferService,
    decode_drag_payload,
)
from .domain.browser import BrowserSession

__all__ = [
    # Version
    "__version__",
    # Core
    "ScpdeckError",
    "setup_logging",
    # Identity
    "IdentityContext",
    "IdentityResolver",
    # Session
    "SessionExecutor",
    "SessionResult",
    "AsyncProcessRunner",
    # Listing
    "EntryKind",
    "RemoteEntry",
    "LocalEntry",
    "RemoteBrowser",
    # Transfer
    "TaskStatus",
    "TransferItemStatus",
    "TransferBatch",
    "TransferService",
    "decode_drag_payload",
    # Browser
    "BrowserSession",
]
