"""Models module - catalog, checksums, and downloading."""

from scribe.models.catalog import ModelCatalog, ModelDescriptor, ModelKind
from scribe.models.checksum import compute_digest, verify
from scribe.models.downloader import DownloadSession, ModelDownloader

__all__ = [
    "ModelCatalog",
    "ModelDescriptor",
    "ModelKind",
    "compute_digest",
    "verify",
    "DownloadSession",
    "ModelDownloader",
]
