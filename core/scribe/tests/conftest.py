"""Shared fixtures: isolated cache directories, a fake clock, disk and remote."""

from pathlib import Path

import httpx
import pytest

from scribe.cache.eviction import EvictionPolicy
from scribe.cache.index import CacheIndex
from scribe.engine.orchestrator import AcquisitionOrchestrator
from scribe.models.catalog import ModelCatalog, ModelDescriptor, ModelKind
from scribe.models.downloader import ModelDownloader
from scribe.utils.disk import DiskSpace

MB = 1024 * 1024
GB = 1024 * MB


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDisk:
    """Disk space probe with a fixed amount of free space, optionally per directory."""

    def __init__(self, available: int = 1 * GB):
        self.available = available
        self.limits: dict[Path, int] = {}
        self.calls: list[Path] = []

    def __call__(self, path: Path) -> DiskSpace:
        self.calls.append(path)
        available = self.limits.get(Path(path), self.available)
        return DiskSpace(total=1000 * GB, available=available)


class FakeRemote:
    """Serves model bytes through httpx.MockTransport and records requests."""

    def __init__(self):
        self.files: dict[str, bytes] = {}
        self.status: dict[str, int] = {}
        self.requests: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        status = self.status.get(url, 200 if url in self.files else 404)
        if status != 200:
            return httpx.Response(status)
        return httpx.Response(200, content=self.files[url])

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache_dir(tmp_path):
    path = tmp_path / "model-cache"
    path.mkdir()
    return path


@pytest.fixture
def models_dir(tmp_path):
    path = tmp_path / "models"
    path.mkdir()
    return path


@pytest.fixture
def cache(cache_dir, clock):
    """An initialized, empty cache index with default bounds."""
    index = CacheIndex(cache_dir=cache_dir, policy=EvictionPolicy(), clock=clock)
    index.initialize()
    return index


@pytest.fixture
def make_artifact():
    """Write bytes to a path, creating parents, and return the path."""

    def _make(path: Path, data: bytes = b"model-weights") -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    return _make


@pytest.fixture
def whisper(models_dir):
    return ModelDescriptor(
        name="whisper-small",
        kind=ModelKind.TRANSCRIPTION,
        source_url="https://models.test/whisper-small.bin",
        local_path=models_dir / "whisper-small.bin",
        version="1.0.0",
        required_bytes=500 * MB,
    )


@pytest.fixture
def summarizer(models_dir):
    return ModelDescriptor(
        name="distilbart-summarization",
        kind=ModelKind.SUMMARIZATION,
        source_url="https://models.test/summarization-model.bin",
        local_path=models_dir / "summarization-model.bin",
        version="1.0.0",
        required_bytes=500 * MB,
    )


@pytest.fixture
def catalog(models_dir, whisper, summarizer):
    return ModelCatalog(models_dir=models_dir, descriptors=[whisper, summarizer])


@pytest.fixture
def remote(whisper, summarizer):
    fake = FakeRemote()
    fake.files[whisper.source_url] = b"whisper-weights" * 64
    fake.files[summarizer.source_url] = b"bart-weights" * 64
    return fake


@pytest.fixture
def disk():
    return FakeDisk()


@pytest.fixture
def downloader(remote):
    return ModelDownloader(transport=remote.transport, chunk_size=256)


@pytest.fixture
def orchestrator(catalog, cache, downloader, disk):
    return AcquisitionOrchestrator(
        catalog=catalog,
        cache=cache,
        downloader=downloader,
        disk_space=disk,
    )
