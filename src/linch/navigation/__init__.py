"""Keyboard and pointer navigation over the filtered grid."""

from .events import (
    KEY_DELETE,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_LEFT,
    KEY_RIGHT,
    KEY_TAB,
    KEY_UP,
    KEYS,
    SCROLL_DIRECTIONS,
    SCROLL_DOWN,
    SCROLL_UP,
    CellClicked,
    Event,
    FocusChanged,
    InputClicked,
    KeyPressed,
    Scrolled,
    TextChanged,
)
from .machine import LauncherSession, Outcome, SessionClosedError
from .state import NavigationState

__all__ = [
    "CellClicked",
    "Event",
    "FocusChanged",
    "InputClicked",
    "KEYS",
    "KEY_DELETE",
    "KEY_DOWN",
    "KEY_ENTER",
    "KEY_ESCAPE",
    "KEY_LEFT",
    "KEY_RIGHT",
    "KEY_TAB",
    "KEY_UP",
    "KeyPressed",
    "LauncherSession",
    "NavigationState",
    "Outcome",
    "SCROLL_DIRECTIONS",
    "SCROLL_DOWN",
    "SCROLL_UP",
    "Scrolled",
    "SessionClosedError",
    "TextChanged",
]
