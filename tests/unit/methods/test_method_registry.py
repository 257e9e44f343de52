from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from linch.catalog import FreeText
from linch.config import load_effective_config
from linch.frecency import FrecencyStore
from linch.methods import (
    MethodDispatchError,
    MethodRegistry,
    register_session_methods,
    register_status_methods,
)
from linch.navigation import LauncherSession
from linch.selection import SelectionCommitter


def _registry(
    tmp_path: Path,
    read_audit_entries: Callable[[str | None, int], list[dict[str, object]]] | None = None,
) -> MethodRegistry:
    session = LauncherSession(
        items=[FreeText("alpha"), FreeText("beta")],
        committer=SelectionCommitter(FrecencyStore(cache_dir=tmp_path), namespace=""),
        rows=2,
        max_columns=2,
    )
    registry = MethodRegistry()
    register_session_methods(registry, session)
    register_status_methods(
        registry,
        session,
        load_effective_config(config_dir=tmp_path / "cfg", environ={"HOME": str(tmp_path)}),
        read_audit_entries or (lambda since, limit: []),
    )
    return registry


@pytest.mark.parametrize(
    "name",
    [
        "session.view",
        "session.input",
        "session.key",
        "session.scroll",
        "session.click",
        "session.focus",
        "session.config",
        "session.audit",
    ],
)
def test_every_session_method_is_registered(tmp_path: Path, name: str) -> None:
    assert _registry(tmp_path).get(name) is not None


def test_unknown_method_raises_dispatch_error() -> None:
    with pytest.raises(MethodDispatchError) as caught:
        MethodRegistry().dispatch("session.nope", {})

    assert caught.value.code == "UNKNOWN_METHOD"


def test_event_methods_return_snapshot(tmp_path: Path) -> None:
    registry = _registry(tmp_path)

    snapshot = registry.dispatch("session.input", {"text": "b"})

    assert snapshot["input"] == "b"
    assert snapshot["filtered_count"] == 1
    assert registry.dispatch("session.click", {"target": "input"})["input_has_focus"] is True
    assert registry.dispatch("session.view", {})["done"] is False


@pytest.mark.parametrize(
    ("method", "params"),
    [
        ("session.input", {}),
        ("session.input", {"text": 3}),
        ("session.key", {"key": "space"}),
        ("session.scroll", {"direction": "left"}),
        ("session.click", {"cell": True}),
        ("session.click", {"target": "grid"}),
        ("session.focus", {"focused": "yes"}),
    ],
)
def test_malformed_params_are_rejected(
    tmp_path: Path, method: str, params: dict[str, object]
) -> None:
    with pytest.raises(MethodDispatchError) as caught:
        _registry(tmp_path).dispatch(method, params)

    assert caught.value.code == "INVALID_PARAMS"


def test_duplicate_registration_is_rejected(tmp_path: Path) -> None:
    registry = _registry(tmp_path)

    with pytest.raises(ValueError, match="session.view"):
        registry.register("session.view", lambda _: {})


def test_config_method_reports_committer_and_effective_config(tmp_path: Path) -> None:
    result = _registry(tmp_path).dispatch("session.config", {})

    assert result["namespace"] == ""
    assert result["caching_enabled"] is False
    assert result["custom"] is False
    effective = result["effective_config"]
    assert isinstance(effective, dict)
    assert effective["config_dir"] == str(tmp_path / "cfg")
    assert effective["audit_enabled"] is True


@pytest.mark.parametrize(
    ("params", "expected"),
    [
        ({}, (None, 50)),
        ({"since": "2026-01-01T00:00:00.000Z", "limit": 5}, ("2026-01-01T00:00:00.000Z", 5)),
        ({"limit": 0}, (None, 1)),
        ({"limit": 10_000}, (None, 200)),
        ({"since": 7, "limit": True}, (None, 50)),
        ({"limit": "3"}, (None, 50)),
    ],
)
def test_audit_method_normalizes_since_and_clamps_limit(
    tmp_path: Path, params: dict[str, object], expected: tuple[str | None, int]
) -> None:
    calls: list[tuple[str | None, int]] = []

    def read(since: str | None, limit: int) -> list[dict[str, object]]:
        calls.append((since, limit))
        return [{"method": "session.view"}]

    result = _registry(tmp_path, read).dispatch("session.audit", params)

    assert calls == [expected]
    assert result == {"entries": [{"method": "session.view"}]}
