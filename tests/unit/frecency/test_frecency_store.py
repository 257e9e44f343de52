from __future__ import annotations

import fcntl
from pathlib import Path

import pytest

from linch.frecency import (
    COUNT_MAX,
    FORMAT_HEADER,
    FrecencyStore,
    FrecencyStoreError,
    resolve_cache_root,
)


def test_missing_file_loads_as_empty(tmp_path: Path) -> None:
    store = FrecencyStore(cache_dir=tmp_path)

    assert store.load("bin") == {}


def test_backing_file_is_namespace_scoped(tmp_path: Path) -> None:
    store = FrecencyStore(cache_dir=tmp_path)

    assert store.path_for("bin") == tmp_path / "linch_bin"
    assert store.path_for("app") == tmp_path / "linch_app"


def test_increment_creates_then_counts(tmp_path: Path) -> None:
    store = FrecencyStore(cache_dir=tmp_path)

    assert store.increment("bin", "gamma") == 1
    assert store.increment("bin", "gamma") == 2
    assert store.increment("bin", "alpha") == 1

    assert store.load("bin") == {"gamma": 2, "alpha": 1}
    lines = (tmp_path / "linch_bin").read_text(encoding="utf-8").splitlines()
    assert lines == [FORMAT_HEADER, "2 gamma", "1 alpha"]


def test_increment_saturates(tmp_path: Path) -> None:
    store = FrecencyStore(cache_dir=tmp_path)
    store.save("bin", {"x": COUNT_MAX})

    for _ in range(3):
        assert store.increment("bin", "x") == COUNT_MAX

    assert store.load("bin") == {"x": COUNT_MAX}


def test_delete_is_idempotent(tmp_path: Path) -> None:
    store = FrecencyStore(cache_dir=tmp_path)
    store.save("bin", {"a": 2, "b": 1})

    assert store.delete("bin", "missing") is False
    assert store.load("bin") == {"a": 2, "b": 1}

    assert store.delete("bin", "a") is True
    assert store.delete("bin", "a") is False
    assert store.load("bin") == {"b": 1}


def test_save_then_load_reproduces_records(tmp_path: Path) -> None:
    store = FrecencyStore(cache_dir=tmp_path)
    records = {"alpha": 5, "beta": 5, "gamma": 1, " spaced ": 2}

    store.save("mode", records)

    assert store.load("mode") == records


def test_reads_files_written_without_header(tmp_path: Path) -> None:
    (tmp_path / "linch_bin").write_text("4 firefox\n2 htop\n", encoding="utf-8")
    store = FrecencyStore(cache_dir=tmp_path)

    assert store.increment("bin", "htop") == 3
    assert store.load("bin") == {"firefox": 4, "htop": 3}


def test_empty_namespace_disables_caching(tmp_path: Path) -> None:
    store = FrecencyStore(cache_dir=tmp_path)

    assert store.load("") == {}
    assert store.increment("", "x") == 0
    assert store.delete("", "x") is False
    assert store.clear("") is False
    store.save("", {"x": 1})

    assert list(tmp_path.iterdir()) == []
    with pytest.raises(ValueError):
        store.path_for("")


def test_clear_removes_backing_file(tmp_path: Path) -> None:
    store = FrecencyStore(cache_dir=tmp_path)
    store.increment("bin", "x")

    assert store.clear("bin") is True
    assert store.clear("bin") is False
    assert store.load("bin") == {}


def test_write_failure_raises_store_error(tmp_path: Path) -> None:
    blocker = tmp_path / "cache"
    blocker.write_text("not a directory", encoding="utf-8")
    store = FrecencyStore(cache_dir=blocker)

    with pytest.raises(FrecencyStoreError):
        store.increment("bin", "x")


def test_lock_is_released_after_each_cycle(tmp_path: Path) -> None:
    store = FrecencyStore(cache_dir=tmp_path)
    store.increment("bin", "x")

    with (tmp_path / "linch_bin.lock").open("a") as handle:
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)


def test_cache_root_resolution_order(tmp_path: Path) -> None:
    explicit = tmp_path / "explicit"

    assert resolve_cache_root(explicit, {"XDG_CACHE_HOME": "/x"}) == explicit
    assert resolve_cache_root(None, {"XDG_CACHE_HOME": "/x", "HOME": "/h"}) == Path("/x")
    assert resolve_cache_root(None, {"HOME": "/h"}) == Path("/h/.cache")
    with pytest.raises(FrecencyStoreError):
        resolve_cache_root(None, {})


def test_lock_failure_raises_store_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def refuse_lock(fd: int, operation: int) -> None:
        raise OSError(37, "No locks available")

    store = FrecencyStore(cache_dir=tmp_path)
    monkeypatch.setattr(fcntl, "flock", refuse_lock)

    with pytest.raises(FrecencyStoreError, match="Could not lock"):
        store.increment("bin", "x")
    assert not (tmp_path / "linch_bin").exists()
