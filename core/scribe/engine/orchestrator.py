"""
Acquisition orchestrator.

Coordinates the catalog, cache index, disk space checks, downloader, and
checksum verification into a single "ensure available" call:

    catalog -> cache index -> local file -> disk space -> download -> verify -> cache

The orchestrator owns no persistent state. It never raises for a model that
cannot be made available; the outcome, including why it failed, is reported
on an AcquisitionResult.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

from scribe.cache.index import CacheIndex
from scribe.config import CACHE_DIR, MODELS_DIR
from scribe.errors import DownloadError, FailureCategory
from scribe.models.catalog import ModelCatalog, ModelDescriptor, ModelKind
from scribe.models.checksum import verify
from scribe.models.downloader import ModelDownloader
from scribe.utils.disk import DiskSpaceProbe, get_disk_space, has_free_space
from scribe.utils.logging import logger


class AcquisitionState(str, Enum):
    """States of a single acquisition."""

    CACHE_HIT = "cache_hit"
    LOCAL_FILE_VALID = "local_file_valid"
    LOCAL_FILE_INVALID = "local_file_invalid"
    DOWNLOAD_NEEDED = "download_needed"
    DOWNLOAD_FAILED = "download_failed"
    READY = "ready"
    UNAVAILABLE = "unavailable"


@dataclass
class AcquisitionResult:
    """Outcome of ensuring one model kind is available."""

    kind: str
    state: AcquisitionState = AcquisitionState.UNAVAILABLE
    descriptor: Optional[ModelDescriptor] = None
    failure: Optional[FailureCategory] = None
    detail: str = ""
    transitions: list[AcquisitionState] = field(default_factory=list)

    @property
    def available(self) -> bool:
        return self.state == AcquisitionState.READY

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "state": self.state.value,
            "model_name": self.descriptor.name if self.descriptor else None,
            "local_path": str(self.descriptor.local_path) if self.descriptor else None,
            "failure": self.failure.value if self.failure else None,
            "detail": self.detail,
            "transitions": [s.value for s in self.transitions],
        }


class AcquisitionOrchestrator:
    """
    Makes catalog models available on local disk.

    Concurrent calls for the same model are not coordinated: two callers
    asking for the same absent model may both download it.
    """

    def __init__(
        self,
        catalog: ModelCatalog,
        cache: CacheIndex,
        downloader: ModelDownloader,
        disk_space: DiskSpaceProbe = get_disk_space,
        redownload_invalid: bool = False,
    ):
        self.catalog = catalog
        self.cache = cache
        self.downloader = downloader
        self.disk_space = disk_space
        self.redownload_invalid = redownload_invalid

    def ensure_available(self, kind: ModelKind | str) -> Optional[ModelDescriptor]:
        """
        Ensure a model of the given kind is on disk.

        Returns:
            A descriptor whose ``local_path`` points at the usable artifact,
            or None when the model is unavailable
        """
        return self.acquire(kind).descriptor

    def acquire(self, kind: ModelKind | str) -> AcquisitionResult:
        """Run the acquisition state machine and report how it ended."""
        kind_value = kind.value if isinstance(kind, ModelKind) else str(kind)
        result = AcquisitionResult(kind=kind_value)

        descriptor = self.catalog.find_by_kind(kind)
        if descriptor is None:
            logger.warning(f"No model configuration found: kind={kind_value}")
            return self._unavailable(result, FailureCategory.CATALOG, "No model configured")

        # Cache first; the entry can vanish between lookup and touch
        entry = self.cache.lookup(descriptor.name)
        if entry is not None:
            entry = self.cache.touch(descriptor.name)
        if entry is not None:
            result.transitions.append(AcquisitionState.CACHE_HIT)
            return self._ready(result, descriptor, entry.cached_path)

        local_path = Path(descriptor.local_path)
        if local_path.is_file():
            if descriptor.expected_checksum and not verify(
                local_path, descriptor.expected_checksum
            ):
                result.transitions.append(AcquisitionState.LOCAL_FILE_INVALID)
                if not self.redownload_invalid:
                    logger.warning(
                        f"Model checksum invalid, delete the file to re-download: "
                        f"name={descriptor.name} path={local_path}"
                    )
                    return self._unavailable(
                        result, FailureCategory.CHECKSUM, f"Checksum mismatch for {local_path}"
                    )

                logger.warning(
                    f"Model checksum invalid, re-downloading: name={descriptor.name}"
                )
                try:
                    local_path.unlink()
                except OSError as e:
                    logger.error(f"Failed to remove invalid model: path={local_path} error={e}")
                    return self._unavailable(
                        result, FailureCategory.FILESYSTEM, f"Cannot remove {local_path}: {e}"
                    )
            else:
                result.transitions.append(AcquisitionState.LOCAL_FILE_VALID)
                return self._cache_and_ready(result, descriptor, local_path)

        return self._download(result, descriptor)

    def _download(
        self, result: AcquisitionResult, descriptor: ModelDescriptor
    ) -> AcquisitionResult:
        result.transitions.append(AcquisitionState.DOWNLOAD_NEEDED)
        local_path = Path(descriptor.local_path)

        # The artifact lands in the target directory, then is copied into the cache
        for directory in (local_path.parent, self.cache.cache_dir):
            if not has_free_space(directory, descriptor.required_bytes, self.disk_space):
                logger.error(
                    f"Insufficient disk space for model download: name={descriptor.name} "
                    f"path={directory} required={descriptor.required_bytes}"
                )
                return self._unavailable(
                    result, FailureCategory.SPACE, f"Insufficient disk space in {directory}"
                )

        try:
            downloaded_path = self.downloader.download(descriptor)
        except DownloadError as e:
            result.transitions.append(AcquisitionState.DOWNLOAD_FAILED)
            logger.error(
                f"Model download failed: name={descriptor.name} "
                f"category={e.category.value} error={e.message}"
            )
            return self._unavailable(result, e.category, e.message)

        if descriptor.expected_checksum and not verify(
            downloaded_path, descriptor.expected_checksum
        ):
            result.transitions.append(AcquisitionState.DOWNLOAD_FAILED)
            try:
                downloaded_path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Failed to remove corrupt download: path={downloaded_path} error={e}")
            return self._unavailable(
                result, FailureCategory.CHECKSUM, "Downloaded file failed checksum verification"
            )

        return self._cache_and_ready(result, descriptor, downloaded_path)

    def _cache_and_ready(
        self, result: AcquisitionResult, descriptor: ModelDescriptor, path: Path
    ) -> AcquisitionResult:
        try:
            entry = self.cache.store(descriptor.name, path, descriptor.version)
        except OSError as e:
            logger.error(f"Model caching failed: name={descriptor.name} error={e}")
            return self._unavailable(result, FailureCategory.FILESYSTEM, f"Caching failed: {e}")
        return self._ready(result, descriptor, entry.cached_path)

    def _ready(
        self, result: AcquisitionResult, descriptor: ModelDescriptor, path: Path
    ) -> AcquisitionResult:
        result.transitions.append(AcquisitionState.READY)
        result.state = AcquisitionState.READY
        result.descriptor = descriptor.model_copy(update={"local_path": Path(path)})
        logger.info(f"Model available: name={descriptor.name} path={path}")
        return result

    def _unavailable(
        self, result: AcquisitionResult, failure: FailureCategory, detail: str
    ) -> AcquisitionResult:
        result.transitions.append(AcquisitionState.UNAVAILABLE)
        result.state = AcquisitionState.UNAVAILABLE
        result.failure = failure
        result.detail = detail
        return result

    def download_all(self) -> dict[str, AcquisitionResult]:
        """Best-effort preload of every catalog model."""
        results: dict[str, AcquisitionResult] = {}

        for descriptor in self.catalog.list_all():
            try:
                result = self.acquire(descriptor.kind)
            except Exception as e:
                logger.error(f"Model preparation failed: name={descriptor.name} error={e}")
                result = AcquisitionResult(
                    kind=descriptor.kind.value,
                    failure=FailureCategory.FILESYSTEM,
                    detail=str(e),
                    transitions=[AcquisitionState.UNAVAILABLE],
                )
            if not result.available:
                logger.warning(
                    f"Model not prepared: name={descriptor.name} "
                    f"failure={result.failure.value if result.failure else None}"
                )
            results[descriptor.name] = result

        ready = sum(1 for r in results.values() if r.available)
        logger.info(f"Model preload finished: ready={ready} total={len(results)}")
        return results

    def clear_cache(self) -> None:
        """Remove every cached model."""
        self.cache.clear()


def build_orchestrator(
    data_dir: Path | None = None,
    **kwargs,
) -> AcquisitionOrchestrator:
    """
    Wire up an orchestrator with default components.

    Args:
        data_dir: Root for ``models/`` and ``model-cache/``; defaults to config
        **kwargs: Passed through to AcquisitionOrchestrator

    Raises:
        CacheInitializationError: The cache directory cannot be created
    """
    models_dir = data_dir / "models" if data_dir else MODELS_DIR
    cache_dir = data_dir / "model-cache" if data_dir else CACHE_DIR

    cache = CacheIndex(cache_dir=cache_dir)
    cache.initialize()

    return AcquisitionOrchestrator(
        catalog=ModelCatalog(models_dir=models_dir),
        cache=cache,
        downloader=ModelDownloader(),
        **kwargs,
    )
