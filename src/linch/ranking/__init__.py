"""Catalog ranking by frecency and natural order."""

from .natural import NaturalKey, natural_key
from .ranker import load_ranking, rank_items

__all__ = ["NaturalKey", "load_ranking", "natural_key", "rank_items"]
