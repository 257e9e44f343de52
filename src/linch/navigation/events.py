"""Discrete input events accepted by a launcher session."""

from __future__ import annotations

from dataclasses import dataclass

KEY_UP = "up"
KEY_DOWN = "down"
KEY_LEFT = "left"
KEY_RIGHT = "right"
KEY_TAB = "tab"
KEY_ENTER = "enter"
KEY_ESCAPE = "escape"
KEY_DELETE = "delete"
KEYS = frozenset(
    {KEY_UP, KEY_DOWN, KEY_LEFT, KEY_RIGHT, KEY_TAB, KEY_ENTER, KEY_ESCAPE, KEY_DELETE}
)
ARROW_KEYS = frozenset({KEY_UP, KEY_DOWN, KEY_LEFT, KEY_RIGHT})

SCROLL_UP = "up"
SCROLL_DOWN = "down"
SCROLL_DIRECTIONS = frozenset({SCROLL_UP, SCROLL_DOWN})


@dataclass(slots=True, frozen=True)
class TextChanged:
    """The input field now holds ``text``."""

    text: str


@dataclass(slots=True, frozen=True)
class KeyPressed:
    """A named key was pressed."""

    key: str

    def __post_init__(self) -> None:
        if self.key not in KEYS:
            raise ValueError(f"Unknown key: {self.key}")


@dataclass(slots=True, frozen=True)
class Scrolled:
    """One scroll tick."""

    direction: str

    def __post_init__(self) -> None:
        if self.direction not in SCROLL_DIRECTIONS:
            raise ValueError(f"Unknown scroll direction: {self.direction}")


@dataclass(slots=True, frozen=True)
class CellClicked:
    """A grid cell of the visible page was clicked (column-major cell number)."""

    cell: int


@dataclass(slots=True, frozen=True)
class InputClicked:
    """The text input was clicked."""


@dataclass(slots=True, frozen=True)
class FocusChanged:
    """The launcher window gained or lost focus."""

    focused: bool


Event = TextChanged | KeyPressed | Scrolled | CellClicked | InputClicked | FocusChanged
