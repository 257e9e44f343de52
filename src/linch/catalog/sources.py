"""Catalog sources: search path scan, desktop entries, and text lines."""

from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import TextIO

from linch.catalog.models import DesktopEntry, FreeText, PathEntry

DESKTOP_ENTRY_GROUP = "[Desktop Entry]"
DEFAULT_XDG_DATA_DIRS = "/usr/local/share/:/usr/share/"
_OTHER_EXECUTE_BIT = 0o1


def scan_executables(search_path: str) -> list[PathEntry]:
    """Return every executable file below each directory of a PATH-style string."""
    entries: list[PathEntry] = []
    for directory in search_path.split(os.pathsep):
        if not directory:
            continue
        for file_path in _walk_files(Path(directory)):
            try:
                stat = file_path.stat()
            except OSError:
                continue
            if stat.st_mode & _OTHER_EXECUTE_BIT != _OTHER_EXECUTE_BIT:
                continue
            entries.append(PathEntry(name=file_path.name, path=file_path))
    return entries


def parse_desktop_entry(path: Path) -> DesktopEntry | None:
    """Parse the [Desktop Entry] group of a .desktop file, or return None."""
    if path.suffix != ".desktop":
        return None
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return None

    values: dict[str, str] = {}
    started = False
    for line in text.splitlines():
        stripped = line.strip()
        if stripped == DESKTOP_ENTRY_GROUP:
            started = True
            continue
        if stripped.startswith("["):
            if started:
                break
            continue
        if not started or "=" not in line:
            continue
        key, value = line.split("=", 1)
        values[key.strip()] = value.lstrip()

    name = values.get("Name")
    if name is None:
        return None
    working_dir = values.get("Path")
    return DesktopEntry(
        name=name,
        file=path,
        exec=values.get("Exec"),
        icon=values.get("Icon"),
        working_dir=Path(working_dir) if working_dir else None,
        hidden=_is_true(values.get("Hidden")) or _is_true(values.get("NoDisplay")),
    )


def application_dirs(environ: Mapping[str, str]) -> list[Path]:
    """Return applications directories in scan order (lowest priority first)."""
    data_dirs = environ.get("XDG_DATA_DIRS") or DEFAULT_XDG_DATA_DIRS
    roots = [Path(part) for part in reversed(data_dirs.split(":")) if part]
    data_home = environ.get("XDG_DATA_HOME")
    if data_home:
        roots.append(Path(data_home))
    elif environ.get("HOME"):
        roots.append(Path(environ["HOME"]) / ".local" / "share")
    return [root / "applications" for root in roots]


def scan_applications(
    include_hidden: bool = False,
    environ: Mapping[str, str] | None = None,
) -> list[DesktopEntry]:
    """Return desktop entries from every XDG applications directory."""
    env = os.environ if environ is None else environ
    entries: list[DesktopEntry] = []
    for directory in application_dirs(env):
        for file_path in _walk_files(directory):
            entry = parse_desktop_entry(file_path)
            if entry is None:
                continue
            if entry.hidden and not include_hidden:
                continue
            entries.append(entry)
    return entries


def read_lines(stream: TextIO) -> list[FreeText]:
    """Return one item per non-blank input line."""
    items: list[FreeText] = []
    for raw_line in stream:
        line = raw_line.rstrip("\r\n")
        if not line.strip():
            continue
        items.append(FreeText(name=line))
    return items


def _walk_files(root: Path) -> Iterator[Path]:
    if not root.is_dir():
        return
    seen: set[str] = set()
    for current, dirnames, filenames in os.walk(root, followlinks=True):
        real = os.path.realpath(current)
        if real in seen:
            dirnames[:] = []
            continue
        seen.add(real)
        dirnames.sort()
        for filename in sorted(filenames):
            yield Path(current) / filename


def _is_true(value: str | None) -> bool:
    return value is not None and value.strip() == "true"
