"""Cache module - cache index and eviction."""

from scribe.cache.entry import CacheEntry, cache_file_name
from scribe.cache.eviction import EvictionPolicy
from scribe.cache.index import CacheIndex

__all__ = [
    "CacheEntry",
    "cache_file_name",
    "EvictionPolicy",
    "CacheIndex",
]
