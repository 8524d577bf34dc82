"""SQLite-backed cache for model shelf-life estimates."""

from .food_cache import FoodCacheDB, cache_key
from .schema import ensure_schema

__all__ = [
    "FoodCacheDB",
    "cache_key",
    "ensure_schema",
]
