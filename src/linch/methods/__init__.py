"""Method interfaces and registrations for the event protocol."""

from .builtin import register_session_methods, register_status_methods
from .registry import MethodDispatchError, MethodHandler, MethodRegistry

__all__ = [
    "MethodDispatchError",
    "MethodHandler",
    "MethodRegistry",
    "register_session_methods",
    "register_status_methods",
]
