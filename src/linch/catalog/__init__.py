"""Candidate item catalog and its sources."""

from .models import DesktopEntry, FreeText, Item, PathEntry, item_to_dict
from .sources import (
    application_dirs,
    parse_desktop_entry,
    read_lines,
    scan_applications,
    scan_executables,
)

__all__ = [
    "DesktopEntry",
    "FreeText",
    "Item",
    "PathEntry",
    "application_dirs",
    "item_to_dict",
    "parse_desktop_entry",
    "read_lines",
    "scan_applications",
    "scan_executables",
]
