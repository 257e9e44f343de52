"""Typed catalog item variants."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(slots=True, frozen=True)
class PathEntry:
    """Executable discovered on the search path."""

    name: str
    path: Path
    kind: str = field(default="path", init=False)


@dataclass(slots=True, frozen=True)
class DesktopEntry:
    """Application described by a desktop entry file."""

    name: str
    file: Path
    exec: str | None = None
    icon: str | None = None
    working_dir: Path | None = None
    hidden: bool = False
    kind: str = field(default="desktop", init=False)


@dataclass(slots=True, frozen=True)
class FreeText:
    """Plain text choice, either supplied line-by-line or typed by the user."""

    name: str
    kind: str = field(default="text", init=False)


Item = PathEntry | DesktopEntry | FreeText


def item_to_dict(item: Item) -> dict[str, object]:
    """Return a JSON-safe representation of any item variant."""
    if isinstance(item, PathEntry):
        return {"kind": item.kind, "name": item.name, "path": str(item.path)}
    if isinstance(item, DesktopEntry):
        return {
            "kind": item.kind,
            "name": item.name,
            "file": str(item.file),
            "exec": item.exec,
            "icon": item.icon,
            "working_dir": str(item.working_dir) if item.working_dir is not None else None,
            "hidden": item.hidden,
        }
    return {"kind": item.kind, "name": item.name}
