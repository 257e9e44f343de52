"""Commit and delete paths feeding the frecency store."""

from __future__ import annotations

from linch.catalog import FreeText, Item
from linch.frecency import FrecencyStore
from linch.ranking import load_ranking


class SelectionCommitter:
    """Owns every write to the frecency store for one namespace."""

    def __init__(self, store: FrecencyStore, namespace: str, custom: bool = False) -> None:
        self._store = store
        self._namespace = namespace
        self._custom = custom

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def caching_enabled(self) -> bool:
        return bool(self._namespace)

    @property
    def custom(self) -> bool:
        return self._custom

    def ranking(self) -> dict[str, int] | None:
        """Return the current counts, or None when caching is disabled."""
        return load_ranking(self._store, self._namespace)

    def commit(self, item: Item | None, raw_input: str) -> Item | None:
        """Record a selection and return the item to launch.

        Catalog items are counted. When nothing is selected and free text is
        allowed, non-empty input becomes an uncounted :class:`FreeText` item.
        """
        if item is not None:
            if self.caching_enabled:
                self._store.increment(self._namespace, item.name)
            return item
        if self._custom and raw_input:
            return FreeText(name=raw_input)
        return None

    def delete(self, item: Item) -> dict[str, int] | None:
        """Forget ``item`` and return the updated counts for re-ranking."""
        if not self.caching_enabled:
            return None
        self._store.delete(self._namespace, item.name)
        return self.ranking()

    def clear(self) -> bool:
        """Forget every selection in this namespace."""
        if not self.caching_enabled:
            return False
        return self._store.clear(self._namespace)
