"""Hand a committed item to the operating system."""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TextIO

from linch.catalog import DesktopEntry, FreeText, Item, PathEntry

DESKTOP_OPENERS: tuple[tuple[str, ...], ...] = (
    ("dex",),
    ("gio", "launch"),
    ("exo-open",),
)

EXEC_FIELD_CODES = frozenset(
    {"%f", "%F", "%u", "%U", "%d", "%D", "%n", "%N", "%i", "%c", "%k", "%v", "%m"}
)

Spawn = Callable[[Sequence[str]], subprocess.Popen[bytes]]
AttemptSink = Callable[[str, bool, str | None], None]


class LaunchError(Exception):
    """Raised when no launch strategy could start the item."""

    def __init__(self, name: str, attempts: list[str]) -> None:
        super().__init__(f"Could not start {name}; tried: {', '.join(attempts) or 'nothing'}")
        self.name = name
        self.attempts = attempts


def _default_spawn(argv: Sequence[str]) -> subprocess.Popen[bytes]:
    return subprocess.Popen(list(argv), start_new_session=True)


def launch_item(
    item: Item,
    out_stream: TextIO,
    spawn: Spawn = _default_spawn,
    on_attempt: AttemptSink | None = None,
) -> None:
    """Start ``item`` according to its kind, or print it for free text."""
    if isinstance(item, FreeText):
        out_stream.write(item.name)
        out_stream.flush()
        return
    if isinstance(item, PathEntry):
        attempts: list[str] = []
        if _try_spawn("program", [item.name], spawn, on_attempt, attempts) is None:
            raise LaunchError(item.name, attempts)
        return
    if isinstance(item, DesktopEntry):
        launch_desktop_entry(item, spawn=spawn, on_attempt=on_attempt)
        return
    raise TypeError(f"Unsupported item type: {type(item).__name__}")


def launch_desktop_entry(
    entry: DesktopEntry,
    spawn: Spawn = _default_spawn,
    on_attempt: AttemptSink | None = None,
) -> None:
    """Try desktop openers, then gtk-launch, then the entry's Exec line."""
    attempts: list[str] = []
    for opener in DESKTOP_OPENERS:
        argv = [*opener, str(entry.file)]
        if _try_spawn(opener[0], argv, spawn, on_attempt, attempts) is not None:
            return

    gtk_argv = ["gtk-launch", entry.file.stem]
    if _try_spawn("gtk-launch", gtk_argv, spawn, on_attempt, attempts, wait=True) is not None:
        return

    exec_argv = exec_command(entry)
    if exec_argv and _try_spawn("exec", exec_argv, spawn, on_attempt, attempts) is not None:
        return
    raise LaunchError(entry.name, attempts)


def exec_command(entry: DesktopEntry) -> list[str]:
    """Split the Exec line on whitespace, dropping field codes and resolving under Path."""
    if not entry.exec:
        return []
    parts = [part for part in entry.exec.split() if part not in EXEC_FIELD_CODES]
    if not parts:
        return []
    program = parts[0]
    if entry.working_dir is not None:
        program = str(Path(entry.working_dir) / program)
    return [program, *parts[1:]]


def _try_spawn(
    label: str,
    argv: list[str],
    spawn: Spawn,
    on_attempt: AttemptSink | None,
    attempts: list[str],
    wait: bool = False,
) -> subprocess.Popen[bytes] | None:
    """Spawn ``argv`` and report the outcome; with ``wait`` a non-zero exit fails."""
    attempts.append(label)
    process: subprocess.Popen[bytes] | None = None
    failure: str | None = None
    try:
        process = spawn(argv)
    except OSError as error:
        failure = str(error)
    if process is not None and wait:
        code = process.wait()
        if code != 0:
            process = None
            failure = f"{argv[0]} exited with status {code}"
    if on_attempt is not None:
        on_attempt(label, process is not None, failure)
    return process
