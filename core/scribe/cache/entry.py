"""Cache entry records and cache file naming."""

import hashlib
from pathlib import Path

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """Metadata for one artifact materialized in the cache."""

    cached_path: Path
    last_used: int  # epoch milliseconds
    size_bytes: int
    version: str


def cache_file_name(name: str, version: str, source_name: str) -> str:
    """Deterministic cache file name, unique per (model, version)."""
    digest = hashlib.sha256(f"{name}-{version}".encode("utf-8")).hexdigest()
    return f"{digest}-{Path(source_name).name}"
