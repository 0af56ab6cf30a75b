"""Tests for size-bounded LRU eviction."""

import json

import pytest

from scribe.cache.entry import CacheEntry
from scribe.cache.eviction import EvictionPolicy
from scribe.cache.index import CacheIndex
from scribe.config import CACHE_INDEX_FILE

GIB = 1024 * 1024 * 1024


def seed_index(cache_dir, clock, entries):
    """Persist entries directly and return a loaded index with a 10 GiB ceiling.

    ``entries`` is a list of (name, size_bytes, last_used_ms).
    """
    payload = []
    for name, size_bytes, last_used in entries:
        path = cache_dir / f"{name}.bin"
        path.write_bytes(name.encode())
        payload.append(
            [
                name,
                {
                    "cached_path": str(path),
                    "last_used": last_used,
                    "size_bytes": size_bytes,
                    "version": "1.0.0",
                },
            ]
        )
    (cache_dir / CACHE_INDEX_FILE).write_text(json.dumps(payload))

    index = CacheIndex(
        cache_dir=cache_dir,
        policy=EvictionPolicy(max_bytes=10 * GIB),
        clock=clock,
    )
    index.load()
    return index


@pytest.fixture
def now_ms(clock):
    return int(clock() * 1000)


@pytest.fixture
def full_cache(cache_dir, clock, now_ms):
    return seed_index(
        cache_dir,
        clock,
        [
            ("a", 5 * GIB, now_ms - 3000),
            ("b", 5 * GIB, now_ms - 2000),
            ("c", 5 * GIB, now_ms - 1000),
        ],
    )


class TestLRU:
    """Eviction order and bounds."""

    def test_two_oldest_are_evicted(self, full_cache, cache_dir):
        new = cache_dir / "d.bin"
        new.write_bytes(b"d")

        full_cache.insert("d", new, 5 * GIB, "1.0.0")

        assert set(full_cache.entries()) == {"c", "d"}
        assert full_cache.total_bytes() <= 10 * GIB
        assert not (cache_dir / "a.bin").exists()
        assert not (cache_dir / "b.bin").exists()
        assert (cache_dir / "c.bin").exists()

    def test_touch_removes_entry_from_eviction_priority(self, full_cache, cache_dir):
        full_cache.touch("a")
        new = cache_dir / "d.bin"
        new.write_bytes(b"d")

        full_cache.insert("d", new, 5 * GIB, "1.0.0")

        assert set(full_cache.entries()) == {"a", "d"}

    def test_eviction_is_idempotent(self, full_cache, cache_dir):
        new = cache_dir / "d.bin"
        new.write_bytes(b"d")
        full_cache.insert("d", new, 5 * GIB, "1.0.0")
        after_first = full_cache.entries()

        assert full_cache.evict() == []
        assert full_cache.entries() == after_first

    def test_equal_timestamps_break_ties_by_name(self, cache_dir, clock, now_ms):
        index = seed_index(
            cache_dir,
            clock,
            [
                ("charlie", 5 * GIB, now_ms - 1000),
                ("alpha", 5 * GIB, now_ms - 1000),
                ("bravo", 5 * GIB, now_ms - 1000),
            ],
        )
        new = cache_dir / "delta.bin"
        new.write_bytes(b"d")

        index.insert("delta", new, 5 * GIB, "1.0.0")

        assert set(index.entries()) == {"charlie", "delta"}

    def test_under_ceiling_is_noop(self, cache_dir, clock, now_ms):
        index = seed_index(cache_dir, clock, [("a", 4 * GIB, now_ms), ("b", 4 * GIB, now_ms)])

        assert index.evict() == []
        assert set(index.entries()) == {"a", "b"}

    def test_oversized_insert_keeps_new_entry(self, full_cache, cache_dir):
        new = cache_dir / "huge.bin"
        new.write_bytes(b"h")

        full_cache.insert("huge", new, 12 * GIB, "1.0.0")

        assert set(full_cache.entries()) == {"huge"}
        assert new.exists()

    def test_eviction_continues_when_file_deletion_fails(self, full_cache, cache_dir, monkeypatch):
        stuck = cache_dir / "a.bin"
        original = full_cache._delete_file

        def delete_file(path):
            if path == stuck:
                return False
            return original(path)

        monkeypatch.setattr(full_cache, "_delete_file", delete_file)
        new = cache_dir / "d.bin"
        new.write_bytes(b"d")

        full_cache.insert("d", new, 5 * GIB, "1.0.0")

        assert set(full_cache.entries()) == {"c", "d"}


class TestPolicy:
    """The policy on its own."""

    def _entry(self, size_bytes, last_used):
        return CacheEntry(cached_path="/x", last_used=last_used, size_bytes=size_bytes, version="1")

    def test_select_victims_oldest_first(self):
        policy = EvictionPolicy(max_bytes=10)
        entries = {
            "new": self._entry(6, 300),
            "old": self._entry(6, 100),
            "mid": self._entry(6, 200),
        }

        assert policy.select_victims(entries) == ["old", "mid"]

    def test_protected_entry_is_skipped(self):
        policy = EvictionPolicy(max_bytes=10)
        entries = {"old": self._entry(6, 100), "new": self._entry(6, 300)}

        assert policy.select_victims(entries, protect="old") == ["new"]

    def test_is_expired_boundary(self):
        policy = EvictionPolicy(max_age_seconds=10)
        entry = self._entry(1, 1_000)

        assert not policy.is_expired(entry, 10_999)
        assert policy.is_expired(entry, 11_000)
