"""
Drag-and-drop payload parser

Remote sources describe themselves as ``{"items": [{"name": ..., "dir": ...}]}``,
local sources as ``{"paths": [...]}`` holding file URLs or absolute paths.
"""
import json
from dataclasses import dataclass, field
from typing import Iterable, List, Union
from urllib.parse import unquote, urlparse

from ...core.exceptions import PayloadError
from ..listing import EntryKind, RemoteEntry


@dataclass(frozen=True)
class DragPayload:
    """Decoded payload: either remote entries or local paths"""
    entries: List[RemoteEntry] = field(default_factory=list)
    paths: List[str] = field(default_factory=list)

    @property
    def is_remote(self) -> bool:
        return bool(self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries and not self.paths


def _local_path(value: str) -> str:
    """file:///a%20b -> /a b; plain paths pass through"""
    if value.startswith("file:"):
        parsed = urlparse(value)
        if parsed.netloc not in ("", "localhost"):
            raise PayloadError(f"Not a local file URL: {value}")
        return unquote(parsed.path)
    return value


def decode_drag_payload(data: Union[str, bytes]) -> DragPayload:
    """
    Decode a drag payload.

    Raises:
        PayloadError: If data is not valid JSON, has neither key or names
            "." or ".."
    """
    try:
        document = json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise PayloadError(f"Invalid drag payload: {e}") from e

    if not isinstance(document, dict):
        raise PayloadError("Drag payload must be a JSON object")

    if "items" in document:
        entries = []
        for item in document["items"] or []:
            if not isinstance(item, dict) or not isinstance(item.get("name"), str):
                raise PayloadError(f"Invalid payload item: {item!r}")
            kind = EntryKind.DIRECTORY if item.get("dir") else EntryKind.FILE
            entry = RemoteEntry(name=item["name"], kind=kind)
            if entry.is_dot_entry:
                raise PayloadError(f"Cannot transfer {entry.name!r}")
            entries.append(entry)
        return DragPayload(entries=entries)

    if "paths" in document:
        paths = []
        for value in document["paths"] or []:
            if not isinstance(value, str):
                raise PayloadError(f"Invalid payload path: {value!r}")
            paths.append(_local_path(value))
        return DragPayload(paths=paths)

    raise PayloadError("Drag payload has neither 'items' nor 'paths'")


def encode_remote_payload(entries: Iterable[RemoteEntry]) -> str:
    """Describe remote entries as a drag source"""
    return json.dumps({"items": [{"name": e.name, "dir": e.is_directory} for e in entries]})
