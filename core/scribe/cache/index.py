"""
Persistent index of cached model artifacts.
The JSON file in the cache directory is the source of truth across restarts.
"""

import json
import os
import shutil
import tempfile
import threading
import time
from pathlib import Path
from typing import Callable, Optional

from pydantic import TypeAdapter

from scribe.cache.entry import CacheEntry, cache_file_name
from scribe.cache.eviction import EvictionPolicy
from scribe.config import CACHE_DIR, CACHE_INDEX_FILE
from scribe.errors import CacheInitializationError
from scribe.utils.disk import format_bytes
from scribe.utils.logging import logger

# Persisted as a list of [model_name, entry] pairs
_INDEX_ADAPTER = TypeAdapter(list[tuple[str, CacheEntry]])


class CacheIndex:
    """
    Maps model names to cache entries and owns the cached files.

    Every mutation is saved immediately. Saves write a temporary file and
    rename it over the index, so loads never observe a partial write. All
    operations are serialized by one re-entrant lock.
    """

    def __init__(
        self,
        cache_dir: Path | None = None,
        policy: Optional[EvictionPolicy] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.cache_dir = cache_dir or CACHE_DIR
        self.index_file = self.cache_dir / CACHE_INDEX_FILE
        self.policy = policy or EvictionPolicy()
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    # ─────────────────────────────────────────────────────────
    # PERSISTENCE
    # ─────────────────────────────────────────────────────────

    def initialize(self) -> None:
        """Create the cache directory and load the index."""
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to initialize model cache: path={self.cache_dir} error={e}")
            raise CacheInitializationError(
                f"Model cache initialization failed: {self.cache_dir}"
            ) from e
        self.load()

    def load(self) -> None:
        """Load the index from disk. Missing or corrupt files yield an empty index."""
        with self._lock:
            if not self.index_file.exists():
                logger.info(f"No cache index found, starting empty: path={self.index_file}")
                self._entries = {}
                return

            try:
                raw = json.loads(self.index_file.read_text(encoding="utf-8"))
                self._entries = dict(_INDEX_ADAPTER.validate_python(raw))
            except (OSError, ValueError) as e:
                logger.warning(
                    f"Cache index unreadable, starting empty: path={self.index_file} error={e}"
                )
                self._entries = {}
                return

            logger.info(f"Loaded cache index: entries={len(self._entries)}")

    def save(self) -> None:
        """Atomically persist the full index."""
        with self._lock:
            data = [
                [name, entry.model_dump(mode="json")]
                for name, entry in self._entries.items()
            ]

            try:
                self.cache_dir.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    dir=self.cache_dir, prefix=".cache-index-", suffix=".tmp"
                )
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        json.dump(data, f, indent=2)
                        f.flush()
                        os.fsync(f.fileno())
                    os.replace(tmp_name, self.index_file)
                except OSError:
                    Path(tmp_name).unlink(missing_ok=True)
                    raise
            except OSError as e:
                logger.error(f"Failed to save cache index: path={self.index_file} error={e}")
                return

            logger.debug(f"Saved cache index: entries={len(self._entries)}")

    # ─────────────────────────────────────────────────────────
    # QUERIES
    # ─────────────────────────────────────────────────────────

    def lookup(self, name: str) -> Optional[CacheEntry]:
        """
        Find a live cache entry.

        Entries whose file disappeared are dropped; entries past the maximum
        age are purged along with their file. Both count as a miss.
        """
        with self._lock:
            entry = self._entries.get(name)
            if entry is None:
                return None

            if not Path(entry.cached_path).is_file():
                logger.warning(
                    f"Cached file missing, dropping entry: name={name} path={entry.cached_path}"
                )
                del self._entries[name]
                self.save()
                return None

            if self.policy.is_expired(entry, self._now_ms()):
                logger.info(f"Cache entry expired: name={name}")
                self.remove(name)
                return None

            return entry

    def entries(self) -> dict[str, CacheEntry]:
        """Snapshot of all entries."""
        with self._lock:
            return dict(self._entries)

    def total_bytes(self) -> int:
        """Total size of all cached artifacts."""
        with self._lock:
            return sum(entry.size_bytes for entry in self._entries.values())

    # ─────────────────────────────────────────────────────────
    # MUTATIONS
    # ─────────────────────────────────────────────────────────

    def touch(self, name: str) -> Optional[CacheEntry]:
        """Mark an entry as used now."""
        with self._lock:
            entry = self._entries.get(name)
            if entry is None:
                return None
            entry = entry.model_copy(update={"last_used": self._now_ms()})
            self._entries[name] = entry
            self.save()
            return entry

    def insert(self, name: str, path: Path, size_bytes: int, version: str) -> CacheEntry:
        """Create or replace an entry, then enforce the size ceiling."""
        with self._lock:
            previous = self._entries.get(name)
            entry = CacheEntry(
                cached_path=Path(path),
                last_used=self._now_ms(),
                size_bytes=size_bytes,
                version=version,
            )
            self._entries[name] = entry
            self.save()

            if previous is not None and Path(previous.cached_path) != entry.cached_path:
                self._delete_file(previous.cached_path)

            logger.info(
                f"Cached model: name={name} version={version} size={format_bytes(size_bytes)}"
            )
            self.evict(protect=name)
            return entry

    def store(self, name: str, source_path: Path, version: str) -> CacheEntry:
        """
        Copy an artifact into the cache directory and register it.

        Raises:
            OSError: The source cannot be read or the copy failed
        """
        source = Path(source_path)
        size_bytes = source.stat().st_size
        cached_path = self.cache_dir / cache_file_name(name, version, source.name)

        if source.resolve() != cached_path.resolve():
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.cache_dir, prefix=".copy-", suffix=".tmp")
            os.close(fd)
            try:
                shutil.copyfile(source, tmp_name)
                os.replace(tmp_name, cached_path)
            except OSError:
                Path(tmp_name).unlink(missing_ok=True)
                raise

        return self.insert(name, cached_path, size_bytes, version)

    def evict(self, protect: Optional[str] = None) -> list[str]:
        """
        Evict least-recently-used entries until the cache fits its ceiling.

        Returns:
            Names of evicted entries
        """
        with self._lock:
            victims = self.policy.select_victims(self._entries, protect=protect)
            for name in victims:
                entry = self._entries.pop(name)
                self._delete_file(entry.cached_path)
                logger.info(
                    f"Evicted cache entry: name={name} size={format_bytes(entry.size_bytes)}"
                )

            if victims:
                self.save()
            return victims

    def remove(self, name: str) -> bool:
        """
        Delete an entry and its file.

        A failed file deletion is logged; the entry is removed regardless.
        """
        with self._lock:
            entry = self._entries.pop(name, None)
            if entry is None:
                return False
            self._delete_file(entry.cached_path)
            self.save()
            logger.info(f"Removed cache entry: name={name}")
            return True

    def clear(self) -> None:
        """Remove every entry and cached file."""
        with self._lock:
            for entry in self._entries.values():
                self._delete_file(entry.cached_path)
            count = len(self._entries)
            self._entries = {}
            self.save()
            logger.info(f"Model cache cleared: entries={count}")

    def _delete_file(self, path: Path) -> bool:
        try:
            Path(path).unlink(missing_ok=True)
            return True
        except OSError as e:
            logger.warning(f"Failed to remove cached file: path={path} error={e}")
            return False
