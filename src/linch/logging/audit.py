"""Structured JSONL audit log for session events and launch attempts."""

from __future__ import annotations

import json
from collections import deque
from collections.abc import Iterator
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

# Fields safe to record as-is when they carry the expected type. Anything else
# is described by shape so typed text and item names stay out of the log.
_VERBATIM_FIELDS: dict[str, type] = {
    "key": str,
    "direction": str,
    "target": str,
    "strategy": str,
    "namespace": str,
    "mode": str,
    "since": str,
    "cell": int,
    "count": int,
    "limit": int,
    "filtered_count": int,
    "focused": bool,
    "ok": bool,
    "done": bool,
    "cleared": bool,
}


@dataclass(slots=True, frozen=True)
class AuditEvent:
    """Sanitized record of one session request or launch attempt."""

    timestamp: str
    request_id: str
    method: str
    ok: bool
    error_code: str | None
    metadata: dict[str, object]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def sanitize_arguments(arguments: dict[str, object]) -> dict[str, object]:
    """Return log-safe metadata for request params, keyed in sorted order."""
    sanitized: dict[str, object] = {}
    for key in sorted(arguments):
        value = arguments[key]
        if _is_verbatim(key, value):
            sanitized[key] = value
        else:
            sanitized.update(_describe(key, value))
    return sanitized


def _is_verbatim(key: str, value: object) -> bool:
    expected = _VERBATIM_FIELDS.get(key)
    if expected is None:
        return value is None or isinstance(value, (int, float, bool))
    if expected is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, expected)


def _describe(key: str, value: object) -> dict[str, object]:
    if isinstance(value, str):
        return {f"{key}_present": bool(value), f"{key}_length": len(value)}
    if isinstance(value, list):
        return {f"{key}_type": "list", f"{key}_length": len(value)}
    if isinstance(value, dict):
        return {f"{key}_type": "dict", f"{key}_keys": sorted(str(k) for k in value)}
    return {f"{key}_type": type(value).__name__}


class JsonlAuditLogger:
    """Append-only audit log, one JSON object per line."""

    def __init__(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self._path = path

    def append(self, event: AuditEvent) -> None:
        line = json.dumps(asdict(event), sort_keys=True)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(f"{line}\n")

    def read(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Return the newest ``limit`` records at or after ``since``."""
        if limit < 1 or not self._path.exists():
            return []
        recent: deque[dict[str, object]] = deque(maxlen=limit)
        for record in self._records():
            timestamp = record.get("timestamp")
            if since is not None and (not isinstance(timestamp, str) or timestamp < since):
                continue
            recent.append(record)
        return list(recent)

    def _records(self) -> Iterator[dict[str, object]]:
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                if not line.strip():
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError:
                    continue
                if isinstance(record, dict):
                    yield record


class NullAuditLogger:
    """Audit logger used when auditing is disabled."""

    def append(self, event: AuditEvent) -> None:
        """Discard the event."""

    def read(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        return []
