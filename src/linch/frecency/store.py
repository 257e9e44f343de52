"""Persistent per-namespace selection counts."""

from __future__ import annotations

import fcntl
import os
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path

from linch.frecency.codec import format_records, parse_records, saturating_increment

CACHE_FILE_PREFIX = "linch_"


class FrecencyStoreError(Exception):
    """Raised when a frecency file cannot be located, read, or written."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


def resolve_cache_root(
    cache_dir: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Path:
    """Return the per-user cache root: explicit dir, XDG_CACHE_HOME, then ~/.cache."""
    if cache_dir is not None:
        return cache_dir
    env = os.environ if environ is None else environ
    xdg_cache = env.get("XDG_CACHE_HOME")
    if xdg_cache:
        return Path(xdg_cache)
    home = env.get("HOME")
    if home:
        return Path(home) / ".cache"
    raise FrecencyStoreError(
        "Could not find cache directory; set XDG_CACHE_HOME or HOME, "
        "or configure cache.dir."
    )


class FrecencyStore:
    """Line-oriented store of selection counts, one file per namespace.

    An empty namespace disables caching: reads return nothing and mutations do
    nothing. Every mutation holds an exclusive lock on a sibling ``.lock`` file
    for its whole load-modify-save cycle and replaces the data file in one step.
    """

    def __init__(
        self,
        cache_dir: Path | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._cache_dir = cache_dir
        self._environ = environ

    def path_for(self, namespace: str) -> Path:
        """Return the backing file for a non-empty namespace."""
        if not namespace:
            raise ValueError("Caching is disabled for the empty namespace.")
        root = resolve_cache_root(self._cache_dir, self._environ)
        return root / f"{CACHE_FILE_PREFIX}{namespace}"

    def load(self, namespace: str) -> dict[str, int]:
        """Return name -> count; a missing file is an empty store."""
        if not namespace:
            return {}
        return self._read(self.path_for(namespace))

    def save(self, namespace: str, records: Mapping[str, int]) -> None:
        """Overwrite the namespace file with the given records."""
        if not namespace:
            return
        path = self.path_for(namespace)
        with self._locked(path):
            self._write(path, records)

    def increment(self, namespace: str, name: str) -> int:
        """Add one selection of ``name`` and return its new count."""
        if not namespace:
            return 0
        path = self.path_for(namespace)
        with self._locked(path):
            records = self._read(path)
            count = saturating_increment(records.get(name, 0))
            records[name] = count
            self._write(path, records)
        return count

    def delete(self, namespace: str, name: str) -> bool:
        """Remove ``name``; return whether a record was present."""
        if not namespace:
            return False
        path = self.path_for(namespace)
        with self._locked(path):
            records = self._read(path)
            removed = records.pop(name, None) is not None
            if removed:
                self._write(path, records)
        return removed

    def clear(self, namespace: str) -> bool:
        """Remove the namespace file; return whether one existed."""
        if not namespace:
            return False
        path = self.path_for(namespace)
        with self._locked(path):
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            except OSError as error:
                raise FrecencyStoreError(f"Could not remove {path}: {error}", path) from error
        return True

    @staticmethod
    def _read(path: Path) -> dict[str, int]:
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError:
            return {}
        except OSError as error:
            raise FrecencyStoreError(f"Could not read {path}: {error}", path) from error
        return parse_records(text)

    @staticmethod
    def _write(path: Path, records: Mapping[str, int]) -> None:
        tmp = path.with_name(path.name + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8") as handle:
                handle.write(format_records(records))
            tmp.replace(path)
        except OSError as error:
            raise FrecencyStoreError(f"Could not write {path}: {error}", path) from error

    @staticmethod
    @contextmanager
    def _locked(path: Path) -> Iterator[None]:
        lock_path = path.with_name(path.name + ".lock")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handle = lock_path.open("a")
        except OSError as error:
            raise FrecencyStoreError(f"Could not lock {path}: {error}", path) from error
        with handle:
            try:
                fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
            except OSError as error:
                raise FrecencyStoreError(f"Could not lock {path}: {error}", path) from error
            try:
                yield
            finally:
                fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
