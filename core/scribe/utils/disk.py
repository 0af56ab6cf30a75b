"""Disk space queries."""

import shutil
from pathlib import Path
from typing import Callable, NamedTuple

from scribe.utils.logging import logger


class DiskSpace(NamedTuple):
    """Total and available bytes on the volume holding a path."""

    total: int
    available: int


DiskSpaceProbe = Callable[[Path], DiskSpace]


def _existing_ancestor(path: Path) -> Path:
    """Return the closest existing directory at or above ``path``."""
    for candidate in (path, *path.parents):
        if candidate.exists():
            return candidate
    return Path.cwd()


def get_disk_space(path: Path) -> DiskSpace:
    """Report disk space for the volume that would hold ``path``."""
    usage = shutil.disk_usage(_existing_ancestor(Path(path)))
    return DiskSpace(total=usage.total, available=usage.free)


def has_free_space(
    path: Path,
    required_bytes: int,
    probe: DiskSpaceProbe = get_disk_space,
) -> bool:
    """
    Check whether at least ``required_bytes`` are free for ``path``.

    A failing probe counts as insufficient space.
    """
    try:
        space = probe(path)
    except OSError as e:
        logger.error(f"Disk space check failed: path={path} error={e}")
        return False

    if space.available < required_bytes:
        logger.error(
            f"Insufficient disk space: path={path} "
            f"required={format_bytes(required_bytes)} "
            f"available={format_bytes(space.available)}"
        )
        return False
    return True


def format_bytes(size: int) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"
