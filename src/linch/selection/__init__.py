"""Committing selections and launching the chosen item."""

from .committer import SelectionCommitter
from .launch import LaunchError, exec_command, launch_desktop_entry, launch_item

__all__ = [
    "LaunchError",
    "SelectionCommitter",
    "exec_command",
    "launch_desktop_entry",
    "launch_item",
]
