"""Session methods exposed over the event protocol."""

from __future__ import annotations

from collections.abc import Callable

from linch.config import LauncherConfig
from linch.methods.registry import MethodDispatchError, MethodHandler, MethodRegistry
from linch.navigation import (
    KEYS,
    SCROLL_DIRECTIONS,
    CellClicked,
    Event,
    FocusChanged,
    InputClicked,
    KeyPressed,
    LauncherSession,
    Scrolled,
    TextChanged,
)

DEFAULT_AUDIT_LIMIT = 50
MAX_AUDIT_LIMIT = 200


def register_session_methods(registry: MethodRegistry, session: LauncherSession) -> None:
    """Register one method per event kind, each returning the session snapshot."""
    registry.register("session.view", _view_handler(session))
    registry.register("session.input", _event_handler(session, _parse_input))
    registry.register("session.key", _event_handler(session, _parse_key))
    registry.register("session.scroll", _event_handler(session, _parse_scroll))
    registry.register("session.click", _event_handler(session, _parse_click))
    registry.register("session.focus", _event_handler(session, _parse_focus))


def register_status_methods(
    registry: MethodRegistry,
    session: LauncherSession,
    config: LauncherConfig,
    read_audit_entries: Callable[[str | None, int], list[dict[str, object]]],
) -> None:
    """Register read-only methods describing the session setup and its audit trail."""
    registry.register("session.config", _config_handler(session, config))
    registry.register("session.audit", _audit_handler(read_audit_entries))


def _config_handler(session: LauncherSession, config: LauncherConfig) -> MethodHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        committer = session.committer
        return {
            "namespace": committer.namespace,
            "caching_enabled": committer.caching_enabled,
            "custom": committer.custom,
            "effective_config": config.to_public_dict(),
        }

    return handler


def _audit_handler(
    read_audit_entries: Callable[[str | None, int], list[dict[str, object]]],
) -> MethodHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        since_value = arguments.get("since")
        limit_value = arguments.get("limit", DEFAULT_AUDIT_LIMIT)

        since = since_value if isinstance(since_value, str) else None
        limit = DEFAULT_AUDIT_LIMIT
        if isinstance(limit_value, int) and not isinstance(limit_value, bool):
            limit = min(max(limit_value, 1), MAX_AUDIT_LIMIT)

        return {"entries": read_audit_entries(since, limit)}

    return handler


def _view_handler(session: LauncherSession) -> MethodHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        return session.snapshot()

    return handler


def _event_handler(
    session: LauncherSession, parse: Callable[[dict[str, object]], Event]
) -> MethodHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        session.handle(parse(arguments))
        return session.snapshot()

    return handler


def _parse_input(arguments: dict[str, object]) -> Event:
    text = arguments.get("text")
    if not isinstance(text, str):
        raise _invalid("session.input params.text must be a string.")
    return TextChanged(text=text)


def _parse_key(arguments: dict[str, object]) -> Event:
    key = arguments.get("key")
    if not isinstance(key, str) or key not in KEYS:
        raise _invalid(f"session.key params.key must be one of: {', '.join(sorted(KEYS))}.")
    return KeyPressed(key=key)


def _parse_scroll(arguments: dict[str, object]) -> Event:
    direction = arguments.get("direction")
    if not isinstance(direction, str) or direction not in SCROLL_DIRECTIONS:
        raise _invalid("session.scroll params.direction must be 'up' or 'down'.")
    return Scrolled(direction=direction)


def _parse_click(arguments: dict[str, object]) -> Event:
    target = arguments.get("target")
    if target is not None:
        if target != "input":
            raise _invalid("session.click params.target must be 'input'.")
        return InputClicked()
    cell = arguments.get("cell")
    if isinstance(cell, bool) or not isinstance(cell, int):
        raise _invalid("session.click params.cell must be an integer.")
    return CellClicked(cell=cell)


def _parse_focus(arguments: dict[str, object]) -> Event:
    focused = arguments.get("focused")
    if not isinstance(focused, bool):
        raise _invalid("session.focus params.focused must be a boolean.")
    return FocusChanged(focused=focused)


def _invalid(message: str) -> MethodDispatchError:
    return MethodDispatchError(code="INVALID_PARAMS", message=message)
