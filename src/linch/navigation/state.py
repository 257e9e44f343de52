"""Cursor and scroll state with its pure transitions.

``count`` arguments are the number of filtered items from the start of the
current page to the end of the filtered sequence. Every transition returns the
state unchanged when its precondition does not hold.
"""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(slots=True, frozen=True)
class NavigationState:
    """Cursor position within a page of ``rows * columns`` cells."""

    rows: int
    columns: int
    input: str = ""
    input_has_focus: bool = False
    cursor_index: int = 0
    scroll_page: int = 0
    window_focused: bool = False

    def __post_init__(self) -> None:
        if self.rows < 1 or self.columns < 1:
            raise ValueError("rows and columns must be positive.")

    @property
    def area(self) -> int:
        """Return the number of cells on one page."""
        return self.rows * self.columns

    @property
    def absolute_index(self) -> int:
        """Return the cursor position within the full filtered sequence."""
        return self.cursor_index + self.scroll_page * self.area

    def remaining(self, filtered_count: int) -> int:
        """Return the number of filtered items from this page onwards."""
        return max(0, filtered_count - self.scroll_page * self.area)


def text_changed(state: NavigationState, text: str) -> NavigationState:
    return replace(state, input=text, cursor_index=0, scroll_page=0)


def toggle_focus(state: NavigationState) -> NavigationState:
    return replace(state, input_has_focus=not state.input_has_focus)


def scroll_down(state: NavigationState, count: int) -> NavigationState:
    area = state.area
    if count <= area:
        return state
    return replace(
        state,
        scroll_page=state.scroll_page + 1,
        cursor_index=min(state.cursor_index, count - area - 1),
    )


def scroll_up(state: NavigationState) -> NavigationState:
    if state.scroll_page == 0:
        return state
    return replace(state, scroll_page=state.scroll_page - 1)


def move_up(state: NavigationState) -> NavigationState:
    rows = state.rows
    if state.cursor_index % rows != 0:
        return replace(state, cursor_index=state.cursor_index - 1)
    if state.scroll_page > 0:
        return replace(
            state,
            scroll_page=state.scroll_page - 1,
            cursor_index=state.cursor_index + rows - 1,
        )
    return state


def move_down(state: NavigationState, count: int) -> NavigationState:
    rows = state.rows
    area = state.area
    cursor = state.cursor_index
    if cursor % rows < rows - 1 and cursor < count - 1:
        return replace(state, cursor_index=cursor + 1)
    if count > area:
        return replace(
            state,
            scroll_page=state.scroll_page + 1,
            cursor_index=min(max(cursor + 1 - rows, 0), count - area - 1),
        )
    return state


def move_right(state: NavigationState, count: int) -> NavigationState:
    if state.cursor_index + state.rows < min(count, state.area):
        return replace(state, cursor_index=state.cursor_index + state.rows)
    return state


def move_left(state: NavigationState) -> NavigationState:
    if state.cursor_index >= state.rows:
        return replace(state, cursor_index=state.cursor_index - state.rows)
    return state


def clamp(state: NavigationState, filtered_count: int) -> NavigationState:
    """Pull the cursor back inside the filtered sequence."""
    if filtered_count < 1:
        if state.cursor_index == 0 and state.scroll_page == 0:
            return state
        return replace(state, cursor_index=0, scroll_page=0)
    area = state.area
    page = min(state.scroll_page, (filtered_count - 1) // area)
    visible = min(filtered_count - page * area, area)
    cursor = min(state.cursor_index, visible - 1)
    if page == state.scroll_page and cursor == state.cursor_index:
        return state
    return replace(state, scroll_page=page, cursor_index=cursor)
