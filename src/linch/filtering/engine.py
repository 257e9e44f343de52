"""Text filtering over the ranked catalog."""

from __future__ import annotations

import math
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from itertools import islice

from linch.catalog import Item


@dataclass(slots=True, frozen=True)
class ItemFilter:
    """Compiled form of the current user input."""

    text: str
    literal: bool
    pattern: re.Pattern[str] | None
    pattern_error: str | None = None

    def matches(self, name: str) -> bool:
        """Return True when ``name`` passes the filter."""
        if self.pattern is None:
            return name.startswith(self.text)
        return self.pattern.search(name) is not None


def compile_filter(text: str, literal: bool) -> ItemFilter:
    """Compile user input once per change.

    Literal mode is a case-sensitive prefix match. Pattern mode is a
    case-insensitive regular expression searched anywhere in the name; input
    that does not compile is searched as escaped literal text instead and the
    compiler message is kept in ``pattern_error``.
    """
    if literal:
        return ItemFilter(text=text, literal=True, pattern=None)
    try:
        pattern = re.compile(text, re.IGNORECASE)
    except re.error as error:
        return ItemFilter(
            text=text,
            literal=False,
            pattern=re.compile(re.escape(text), re.IGNORECASE),
            pattern_error=str(error),
        )
    return ItemFilter(text=text, literal=False, pattern=pattern)


class FilteredView:
    """Lazy, restartable view of the items passing a filter."""

    def __init__(self, items: Sequence[Item], item_filter: ItemFilter) -> None:
        self._items = items
        self._filter = item_filter

    @property
    def item_filter(self) -> ItemFilter:
        """Return the filter this view applies."""
        return self._filter

    def __iter__(self) -> Iterator[Item]:
        return (item for item in self._items if self._filter.matches(item.name))

    def count(self) -> int:
        """Return the number of matching items."""
        return sum(1 for _ in self)

    def nth(self, index: int) -> Item | None:
        """Return the matching item at ``index``, or None past the end."""
        if index < 0:
            return None
        return next(islice(self, index, None), None)

    def page(self, start: int, size: int) -> list[Item]:
        """Return up to ``size`` matching items starting at ``start``."""
        if start < 0 or size < 1:
            return []
        return list(islice(self, start, start + size))


def filtered_view(items: Sequence[Item], item_filter: ItemFilter) -> FilteredView:
    """Return the filtered view of ranked ``items``."""
    return FilteredView(items, item_filter)


def column_count(total_items: int, rows: int, max_columns: int) -> int:
    """Return the number of grid columns for a catalog of ``total_items``."""
    if rows < 1 or max_columns < 1:
        raise ValueError("rows and max_columns must be positive.")
    needed = math.ceil(total_items / rows)
    return max(1, min(needed, max_columns))
