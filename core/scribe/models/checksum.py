"""SHA-256 digests for model artifacts."""

import hashlib
from pathlib import Path

from scribe.config import HASH_CHUNK_SIZE
from scribe.utils.logging import logger


def compute_digest(file_path: Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """Stream a file through SHA-256 and return the lowercase hex digest."""
    sha256 = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            sha256.update(chunk)
    return sha256.hexdigest()


def verify(file_path: Path, expected_digest: str) -> bool:
    """
    Compare a file's digest against an expected value.

    Args:
        file_path: File to hash
        expected_digest: Hex digest, case-insensitive

    Returns:
        True only on an exact match. An empty expected digest or an
        unreadable file yields False.
    """
    expected = (expected_digest or "").strip().lower()
    if not expected:
        return False

    try:
        actual = compute_digest(file_path)
    except OSError as e:
        logger.error(f"Checksum verification failed: path={file_path} error={e}")
        return False

    if actual != expected:
        logger.warning(
            f"Checksum mismatch: path={file_path} expected={expected} actual={actual}"
        )
        return False
    return True
