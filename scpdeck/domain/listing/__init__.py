"""
Listing domain module
"""
from .models import EntryKind, RemoteEntry, LocalEntry
from .parser import parse_listing, parse_line, sort_entries, build_listing_command
from .remote import RemoteBrowser
from . import local

__all__ = [
    "EntryKind",
    "RemoteEntry",
    "LocalEntry",
    "parse_listing",
    "parse_line",
    "sort_entries",
    "build_listing_command",
    "RemoteBrowser",
    "local",
]
