"""
Directory listing models
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any

from ...core.constants import DOT_ENTRIES


class EntryKind(str, Enum):
    """Remote entry type"""
    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"


@dataclass(frozen=True)
class RemoteEntry:
    """One item of a remote directory listing, identified by name"""
    name: str
    kind: EntryKind
    relative_path: str = ""

    @property
    def id(self) -> str:
        return self.name

    @property
    def is_directory(self) -> bool:
        return self.kind == EntryKind.DIRECTORY

    @property
    def is_dot_entry(self) -> bool:
        """Whether this is the "." or ".." entry"""
        return self.name in DOT_ENTRIES

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "name": self.name,
            "kind": self.kind.value,
            "relative_path": self.relative_path,
        }


@dataclass(frozen=True)
class LocalEntry:
    """Snapshot of one local directory entry, identified by absolute path"""
    absolute_path: str
    name: str
    is_directory: bool
    modified: float = field(default=0.0, compare=False)

    @property
    def id(self) -> str:
        return self.absolute_path
