"""Literal and pattern filtering of ranked items."""

from .engine import FilteredView, ItemFilter, column_count, compile_filter, filtered_view

__all__ = ["FilteredView", "ItemFilter", "column_count", "compile_filter", "filtered_view"]
