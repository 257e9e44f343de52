"""Launcher session: event dispatch over the ranked, filtered catalog."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from linch.catalog import Item, item_to_dict
from linch.filtering import FilteredView, column_count, compile_filter, filtered_view
from linch.navigation import state as transitions
from linch.navigation.events import (
    ARROW_KEYS,
    KEY_DELETE,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_LEFT,
    KEY_RIGHT,
    KEY_TAB,
    KEY_UP,
    SCROLL_DOWN,
    CellClicked,
    Event,
    FocusChanged,
    InputClicked,
    KeyPressed,
    Scrolled,
    TextChanged,
)
from linch.navigation.state import NavigationState
from linch.ranking import rank_items
from linch.selection.committer import SelectionCommitter


@dataclass(slots=True, frozen=True)
class Outcome:
    """Result of handling one event."""

    done: bool
    selection: Item | None = None


class SessionClosedError(Exception):
    """Raised when an event arrives after the session has ended."""


class LauncherSession:
    """Single interactive session from catalog to committed item.

    Events are handled one at a time to completion. The session ends on commit,
    cancel, or focus loss; :meth:`run` returns the committed item directly.
    """

    def __init__(
        self,
        items: Sequence[Item],
        committer: SelectionCommitter,
        rows: int,
        max_columns: int,
        literal: bool = False,
        exit_unfocus: bool = False,
        prompt: str = "",
    ) -> None:
        self._catalog = list(items)
        self._committer = committer
        self._literal = literal
        self._exit_unfocus = exit_unfocus
        self._prompt = prompt
        self._ranked = rank_items(self._catalog, committer.ranking())
        self._filter = compile_filter("", literal)
        self._state = NavigationState(
            rows=rows,
            columns=column_count(len(self._catalog), rows, max_columns),
        )
        self._done = False
        self._selection: Item | None = None

    @property
    def state(self) -> NavigationState:
        return self._state

    @property
    def done(self) -> bool:
        return self._done

    @property
    def selection(self) -> Item | None:
        return self._selection

    @property
    def committer(self) -> SelectionCommitter:
        return self._committer

    @property
    def ranked_items(self) -> tuple[Item, ...]:
        return tuple(self._ranked)

    def view(self) -> FilteredView:
        """Return the filtered view for the current input."""
        return filtered_view(self._ranked, self._filter)

    def selected(self) -> Item | None:
        """Return the item under the cursor, if any."""
        return self.view().nth(self._state.absolute_index)

    def run(self, events: Iterable[Event]) -> Item | None:
        """Feed events until the session ends; exhausted input cancels."""
        for event in events:
            outcome = self.handle(event)
            if outcome.done:
                return outcome.selection
        self.cancel()
        return None

    def cancel(self) -> None:
        """End the session without a selection."""
        if not self._done:
            self._finish(None)

    def handle(self, event: Event) -> Outcome:
        """Apply one event and report whether the session has ended."""
        if self._done:
            raise SessionClosedError("Session has already ended.")

        if isinstance(event, TextChanged):
            self._filter = compile_filter(event.text, self._literal)
            self._state = transitions.text_changed(self._state, event.text)
        elif isinstance(event, KeyPressed):
            return self._handle_key(event.key)
        elif isinstance(event, Scrolled):
            if event.direction == SCROLL_DOWN:
                self._state = transitions.scroll_down(self._state, self._remaining())
            else:
                self._state = transitions.scroll_up(self._state)
        elif isinstance(event, CellClicked):
            return self._handle_click(event.cell)
        elif isinstance(event, InputClicked):
            self._state = replace(self._state, input_has_focus=True)
        elif isinstance(event, FocusChanged):
            if event.focused:
                self._state = replace(self._state, window_focused=True)
            elif self._exit_unfocus and self._state.window_focused:
                return self._finish(None)
        return Outcome(done=False)

    def snapshot(self) -> dict[str, object]:
        """Return a JSON-safe description of the visible page."""
        state = self._state
        view = self.view()
        page = view.page(state.scroll_page * state.area, state.area)
        cells = [
            {
                "cell": cell,
                "name": item.name,
                "kind": item.kind,
                "highlighted": cell == state.cursor_index,
            }
            for cell, item in enumerate(page)
        ]
        return {
            "prompt": self._prompt,
            "input": state.input,
            "input_has_focus": state.input_has_focus,
            "cursor_index": state.cursor_index,
            "scroll_page": state.scroll_page,
            "rows": state.rows,
            "columns": state.columns,
            "filtered_count": view.count(),
            "pattern_error": self._filter.pattern_error,
            "cells": cells,
            "done": self._done,
            "selection": item_to_dict(self._selection) if self._selection is not None else None,
        }

    def _handle_key(self, key: str) -> Outcome:
        if key == KEY_ENTER:
            return self._commit()
        if key == KEY_ESCAPE:
            return self._finish(None)
        if key == KEY_TAB:
            self._state = transitions.toggle_focus(self._state)
            return Outcome(done=False)
        if key == KEY_DELETE:
            self._delete()
            return Outcome(done=False)
        if key in ARROW_KEYS and not self._state.input_has_focus:
            self._state = self._move(key)
        return Outcome(done=False)

    def _move(self, key: str) -> NavigationState:
        state = self._state
        if key == KEY_UP:
            return transitions.move_up(state)
        if key == KEY_DOWN:
            return transitions.move_down(state, self._remaining())
        if key == KEY_RIGHT:
            return transitions.move_right(state, self._remaining())
        if key == KEY_LEFT:
            return transitions.move_left(state)
        return state

    def _handle_click(self, cell: int) -> Outcome:
        visible = min(self._remaining(), self._state.area)
        if cell < 0 or cell >= visible:
            return Outcome(done=False)
        highlighted = cell == self._state.cursor_index
        self._state = replace(self._state, input_has_focus=False)
        if highlighted:
            return self._commit()
        self._state = replace(self._state, cursor_index=cell)
        return Outcome(done=False)

    def _commit(self) -> Outcome:
        item = self._committer.commit(self.selected(), self._state.input)
        return self._finish(item)

    def _delete(self) -> None:
        if not self._committer.caching_enabled:
            return
        item = self.selected()
        if item is None:
            return
        ranking = self._committer.delete(item)
        self._ranked = rank_items(self._catalog, ranking)
        self._state = transitions.clamp(self._state, self.view().count())

    def _finish(self, selection: Item | None) -> Outcome:
        self._done = True
        self._selection = selection
        return Outcome(done=True, selection=selection)

    def _remaining(self) -> int:
        return self._state.remaining(self.view().count())
