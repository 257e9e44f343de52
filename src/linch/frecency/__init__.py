"""Persistent usage-frequency ranking store."""

from .codec import (
    COUNT_MAX,
    FORMAT_HEADER,
    FORMAT_VERSION,
    escape_name,
    format_records,
    parse_records,
    saturating_increment,
    unescape_name,
)
from .store import FrecencyStore, FrecencyStoreError, resolve_cache_root

__all__ = [
    "COUNT_MAX",
    "FORMAT_HEADER",
    "FORMAT_VERSION",
    "FrecencyStore",
    "FrecencyStoreError",
    "escape_name",
    "format_records",
    "parse_records",
    "resolve_cache_root",
    "saturating_increment",
    "unescape_name",
]
