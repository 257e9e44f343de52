"""Line grammar for frecency files.

A frecency file holds one ``<count> <name>`` record per line. Version 2 files
start with :data:`FORMAT_HEADER` and escape names so that any string survives a
save/load cycle:

``\\\\`` backslash, ``\\n`` newline, ``\\r`` carriage return, ``\\t`` tab, and
``\\s`` for a space at either end of the name. Files without the header are
read as version 1, where names are taken verbatim.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping

FORMAT_VERSION = 2
FORMAT_HEADER = f"# linch-frecency v{FORMAT_VERSION}"
COUNT_MAX = 2**64 - 1
RECORD_PATTERN = re.compile(r"^(\d+)\s+(.+)$")
# Versioned names escape edge spaces and tabs, so only literal spaces separate fields.
VERSIONED_RECORD_PATTERN = re.compile(r"^(\d+) +(.+)$")

_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\r": "\\r", "\t": "\\t"}
_UNESCAPES = {"\\": "\\", "n": "\n", "r": "\r", "t": "\t", "s": " "}


def escape_name(name: str) -> str:
    """Escape a name for a version 2 record line."""
    escaped = "".join(_ESCAPES.get(char, char) for char in name)
    leading = len(escaped) - len(escaped.lstrip(" "))
    if leading == len(escaped):
        return "\\s" * leading
    trailing = len(escaped) - len(escaped.rstrip(" "))
    core = escaped[leading : len(escaped) - trailing]
    return ("\\s" * leading) + core + ("\\s" * trailing)


def unescape_name(text: str) -> str:
    """Reverse :func:`escape_name`; unknown escapes are kept literally."""
    output: list[str] = []
    index = 0
    while index < len(text):
        char = text[index]
        if char == "\\" and index + 1 < len(text):
            replacement = _UNESCAPES.get(text[index + 1])
            if replacement is not None:
                output.append(replacement)
                index += 2
                continue
        output.append(char)
        index += 1
    return "".join(output)


def parse_records(text: str) -> dict[str, int]:
    """Parse file text into a name -> count mapping, skipping malformed lines."""
    lines = _split_lines(text)
    versioned = bool(lines) and lines[0].strip() == FORMAT_HEADER
    body = lines[1:] if versioned else lines
    parsed = (parse_record_line(line, versioned=versioned) for line in body)
    return merge_counts(record for record in parsed if record is not None)


def parse_record_line(line: str, versioned: bool) -> tuple[str, int] | None:
    """Parse one record line, or return None when it does not match the grammar."""
    candidate = line if versioned else line.strip()
    pattern = VERSIONED_RECORD_PATTERN if versioned else RECORD_PATTERN
    match = pattern.match(candidate)
    if match is None:
        return None
    count = min(int(match.group(1)), COUNT_MAX)
    if count < 1:
        return None
    raw_name = match.group(2)
    name = unescape_name(raw_name) if versioned else raw_name
    return name, count


def format_records(records: Mapping[str, int]) -> str:
    """Serialize records as version 2 text, ordered by count then name."""
    lines = [FORMAT_HEADER]
    for name, count in sorted_records(records):
        if not name:
            continue
        lines.append(f"{count} {escape_name(name)}")
    return "\n".join(lines) + "\n"


def sorted_records(records: Mapping[str, int]) -> list[tuple[str, int]]:
    """Return records ordered by count descending, then name."""
    return sorted(records.items(), key=lambda item: (-item[1], item[0]))


def saturating_increment(count: int) -> int:
    """Increment a count without exceeding :data:`COUNT_MAX`."""
    if count >= COUNT_MAX:
        return COUNT_MAX
    return count + 1


def merge_counts(pairs: Iterable[tuple[str, int]]) -> dict[str, int]:
    """Collapse repeated names, keeping the largest count."""
    merged: dict[str, int] = {}
    for name, count in pairs:
        if count > merged.get(name, -1):
            merged[name] = count
    return merged


def _split_lines(text: str) -> list[str]:
    lines = [line.removesuffix("\r") for line in text.split("\n")]
    if lines and not lines[-1]:
        lines.pop()
    return lines
