"""
Size and age bounds for the model cache.

The policy only decides; the cache index owns entries and performs removals.
"""

from typing import Mapping, Optional

from scribe.cache.entry import CacheEntry
from scribe.config import MAX_CACHE_BYTES, MAX_MODEL_AGE_SECONDS


class EvictionPolicy:
    """Least-recently-used eviction under a total size ceiling, plus age expiry."""

    def __init__(
        self,
        max_bytes: int = MAX_CACHE_BYTES,
        max_age_seconds: float = MAX_MODEL_AGE_SECONDS,
    ):
        self.max_bytes = max_bytes
        self.max_age_ms = int(max_age_seconds * 1000)

    def is_expired(self, entry: CacheEntry, now_ms: int) -> bool:
        """An entry unused for at least the maximum age is expired."""
        return now_ms - entry.last_used >= self.max_age_ms

    def select_victims(
        self,
        entries: Mapping[str, CacheEntry],
        protect: Optional[str] = None,
    ) -> list[str]:
        """
        Pick the entries to evict so the total fits under ``max_bytes``.

        Args:
            entries: Current cache entries by model name
            protect: Name that must survive (the entry just inserted)

        Returns:
            Model names to evict, oldest first. Empty when already under
            the ceiling.
        """
        total = sum(entry.size_bytes for entry in entries.values())
        if total <= self.max_bytes:
            return []

        # Oldest first; equal timestamps fall back to name order
        ordered = sorted(entries.items(), key=lambda item: (item[1].last_used, item[0]))

        victims = []
        for name, entry in ordered:
            if total <= self.max_bytes:
                break
            if name == protect:
                continue
            victims.append(name)
            total -= entry.size_bytes

        return victims
