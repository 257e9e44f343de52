"""Display ordering of the catalog."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from linch.catalog import Item
from linch.frecency import FrecencyStore
from linch.ranking.natural import natural_key


def rank_items(items: Sequence[Item], frecency: Mapping[str, int] | None = None) -> list[Item]:
    """Order items by frecency count (descending) then natural name order.

    With ``frecency`` set to None only natural order applies. Items missing from
    the mapping count as zero. Items sharing a name share a count.
    """
    if frecency is None:
        return sorted(items, key=lambda item: natural_key(item.name))
    return sorted(
        items,
        key=lambda item: (-frecency.get(item.name, 0), natural_key(item.name)),
    )


def load_ranking(store: FrecencyStore, namespace: str) -> dict[str, int] | None:
    """Return the frecency mapping for ranking, or None when caching is disabled."""
    if not namespace:
        return None
    return store.load(namespace)
