"""Structured logging utilities."""

from .audit import (
    AuditEvent,
    JsonlAuditLogger,
    NullAuditLogger,
    sanitize_arguments,
    utc_timestamp,
)

__all__ = [
    "AuditEvent",
    "JsonlAuditLogger",
    "NullAuditLogger",
    "sanitize_arguments",
    "utc_timestamp",
]
