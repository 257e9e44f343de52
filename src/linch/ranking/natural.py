"""Natural ordering for display names."""

from __future__ import annotations

import re

_RUN_PATTERN = re.compile(r"\d+|\D+")

NaturalKey = tuple[tuple[tuple[int, int | str], ...], str]


def natural_key(name: str) -> NaturalKey:
    """Return a sort key comparing digit runs by value and text case-insensitively.

    Digit runs sort before text runs at the same position. Names that are
    equal under that comparison fall back to plain code point order, so the
    key is total: ``"file2" < "file10"`` and ``"A" < "a"``.
    """
    runs: list[tuple[int, int | str]] = []
    for run in _RUN_PATTERN.findall(name):
        if run.isdecimal():
            runs.append((0, int(run)))
        else:
            runs.append((1, run.casefold()))
    return tuple(runs), name