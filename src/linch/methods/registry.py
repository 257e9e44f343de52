"""Name-to-handler table for session methods."""

from __future__ import annotations

from collections.abc import Callable

MethodHandler = Callable[[dict[str, object]], dict[str, object]]


class MethodDispatchError(Exception):
    """A request could not be routed to, or accepted by, a method handler."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class MethodRegistry:
    """Registered methods keyed by name."""

    def __init__(self) -> None:
        self._handlers: dict[str, MethodHandler] = {}

    def register(self, name: str, handler: MethodHandler) -> None:
        if name in self._handlers:
            raise ValueError(f"Method already registered: {name}")
        self._handlers[name] = handler

    def get(self, name: str) -> MethodHandler | None:
        return self._handlers.get(name)

    def dispatch(self, name: str, arguments: dict[str, object]) -> dict[str, object]:
        """Call the handler for ``name``; unknown names raise UNKNOWN_METHOD."""
        handler = self.get(name)
        if handler is None:
            raise MethodDispatchError("UNKNOWN_METHOD", f"Unknown method: {name}")
        return handler(arguments)
