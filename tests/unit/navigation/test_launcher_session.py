from __future__ import annotations

from pathlib import Path

import pytest

from linch.catalog import FreeText
from linch.frecency import FrecencyStore, FrecencyStoreError
from linch.navigation import (
    KEY_DELETE,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_RIGHT,
    KEY_TAB,
    CellClicked,
    FocusChanged,
    InputClicked,
    KeyPressed,
    LauncherSession,
    Scrolled,
    SessionClosedError,
    TextChanged,
)
from linch.selection import SelectionCommitter


def _session(
    tmp_path: Path,
    names: list[str],
    namespace: str = "",
    rows: int = 2,
    max_columns: int = 2,
    custom: bool = False,
    literal: bool = True,
    exit_unfocus: bool = False,
) -> LauncherSession:
    store = FrecencyStore(cache_dir=tmp_path / "cache")
    committer = SelectionCommitter(store=store, namespace=namespace, custom=custom)
    return LauncherSession(
        items=[FreeText(name) for name in names],
        committer=committer,
        rows=rows,
        max_columns=max_columns,
        literal=literal,
        exit_unfocus=exit_unfocus,
    )


def _visible(session: LauncherSession) -> list[str]:
    return [item.name for item in session.view()]


def test_typing_narrows_view_and_enter_commits(tmp_path: Path) -> None:
    session = _session(tmp_path, ["gamma", "beta", "alpha"], namespace="test")

    assert session.state.columns == 2
    assert _visible(session) == ["alpha", "beta", "gamma"]
    assert session.selected() == FreeText("alpha")

    session.handle(TextChanged("g"))
    assert _visible(session) == ["gamma"]
    assert session.state.cursor_index == 0

    outcome = session.handle(KeyPressed(KEY_ENTER))

    assert outcome.done is True
    assert outcome.selection == FreeText("gamma")
    assert FrecencyStore(cache_dir=tmp_path / "cache").load("test") == {"gamma": 1}


def test_commit_with_caching_disabled_writes_nothing(tmp_path: Path) -> None:
    session = _session(tmp_path, ["alpha", "beta"])

    assert session.handle(KeyPressed(KEY_ENTER)).selection == FreeText("alpha")
    assert not (tmp_path / "cache").exists()


def test_escape_cancels_without_selection(tmp_path: Path) -> None:
    session = _session(tmp_path, ["alpha"])

    outcome = session.handle(KeyPressed(KEY_ESCAPE))

    assert outcome.done is True
    assert outcome.selection is None
    assert session.done is True


def test_events_after_end_are_rejected(tmp_path: Path) -> None:
    session = _session(tmp_path, ["alpha"])
    session.handle(KeyPressed(KEY_ESCAPE))

    with pytest.raises(SessionClosedError):
        session.handle(TextChanged("a"))


def test_tab_gives_input_focus_and_disables_arrows(tmp_path: Path) -> None:
    session = _session(tmp_path, ["a", "b", "c"])

    session.handle(KeyPressed(KEY_TAB))
    session.handle(KeyPressed(KEY_DOWN))
    assert session.state.input_has_focus is True
    assert session.state.cursor_index == 0

    session.handle(KeyPressed(KEY_TAB))
    session.handle(KeyPressed(KEY_DOWN))
    assert session.state.cursor_index == 1
    session.handle(KeyPressed(KEY_RIGHT))
    assert session.state.cursor_index == 1


def test_no_match_commits_typed_text_when_custom_allowed(tmp_path: Path) -> None:
    session = _session(tmp_path, [], namespace="t", custom=True)

    session.handle(TextChanged("hello world"))
    outcome = session.handle(KeyPressed(KEY_ENTER))

    assert outcome.selection == FreeText("hello world")
    assert FrecencyStore(cache_dir=tmp_path / "cache").load("t") == {}


def test_no_match_without_custom_ends_with_no_selection(tmp_path: Path) -> None:
    session = _session(tmp_path, ["alpha"])

    session.handle(TextChanged("zzz"))
    outcome = session.handle(KeyPressed(KEY_ENTER))

    assert outcome.done is True
    assert outcome.selection is None


def test_delete_forgets_item_and_reranks(tmp_path: Path) -> None:
    FrecencyStore(cache_dir=tmp_path / "cache").save("t", {"beta": 3})
    session = _session(tmp_path, ["alpha", "beta"], namespace="t")
    assert _visible(session) == ["beta", "alpha"]

    session.handle(KeyPressed(KEY_DELETE))

    assert session.done is False
    assert _visible(session) == ["alpha", "beta"]
    assert FrecencyStore(cache_dir=tmp_path / "cache").load("t") == {}


def test_delete_is_ignored_when_caching_disabled(tmp_path: Path) -> None:
    session = _session(tmp_path, ["alpha", "beta"])

    session.handle(KeyPressed(KEY_DELETE))

    assert session.done is False
    assert _visible(session) == ["alpha", "beta"]


def test_focus_loss_ends_session_only_after_focus_was_gained(tmp_path: Path) -> None:
    session = _session(tmp_path, ["alpha"], exit_unfocus=True)

    assert session.handle(FocusChanged(False)).done is False
    session.handle(FocusChanged(True))
    outcome = session.handle(FocusChanged(False))

    assert outcome.done is True
    assert outcome.selection is None


def test_focus_loss_is_ignored_without_exit_unfocus(tmp_path: Path) -> None:
    session = _session(tmp_path, ["alpha"])
    session.handle(FocusChanged(True))

    assert session.handle(FocusChanged(False)).done is False


def test_click_moves_cursor_then_commits_highlighted_cell(tmp_path: Path) -> None:
    session = _session(tmp_path, ["alpha", "beta", "gamma"], namespace="t")
    session.handle(InputClicked())
    assert session.state.input_has_focus is True

    assert session.handle(CellClicked(1)).done is False
    assert session.state.cursor_index == 1
    assert session.state.input_has_focus is False

    outcome = session.handle(CellClicked(1))
    assert outcome.selection == FreeText("beta")


def test_click_outside_visible_cells_is_ignored(tmp_path: Path) -> None:
    session = _session(tmp_path, ["alpha", "beta", "gamma"])

    assert session.handle(CellClicked(3)).done is False
    assert session.handle(CellClicked(-1)).done is False
    assert session.state.cursor_index == 0


def test_scroll_moves_to_next_page(tmp_path: Path) -> None:
    session = _session(tmp_path, [f"item{n}" for n in range(10)])

    session.handle(Scrolled("down"))

    assert session.state.scroll_page == 1
    assert session.selected() == FreeText("item4")
    assert [cell["name"] for cell in session.snapshot()["cells"]] == [
        "item4",
        "item5",
        "item6",
        "item7",
    ]

    session.handle(Scrolled("up"))
    assert session.state.scroll_page == 0


def test_run_returns_selection_and_exhausted_events_cancel(tmp_path: Path) -> None:
    first = _session(tmp_path, ["alpha", "beta"])
    assert first.run([KeyPressed(KEY_DOWN), KeyPressed(KEY_ENTER)]) == FreeText("beta")

    second = _session(tmp_path, ["alpha", "beta"])
    assert second.run([TextChanged("b")]) is None
    assert second.done is True


def test_snapshot_reports_pattern_error(tmp_path: Path) -> None:
    session = _session(tmp_path, ["c++", "cat"], literal=False)

    session.handle(TextChanged("c++"))
    snapshot = session.snapshot()

    assert snapshot["pattern_error"]
    assert snapshot["filtered_count"] == 1
    assert snapshot["cells"] == [
        {"cell": 0, "name": "c++", "kind": "text", "highlighted": True}
    ]


def test_store_failure_on_commit_keeps_session_open(tmp_path: Path) -> None:
    session = _session(tmp_path, ["alpha"], namespace="t")
    (tmp_path / "cache").write_text("blocks the cache directory", encoding="utf-8")

    with pytest.raises(FrecencyStoreError):
        session.handle(KeyPressed(KEY_ENTER))

    assert session.done is False
