"""Exceptions and failure categories for model acquisition."""

from enum import Enum


class FailureCategory(str, Enum):
    """Why a model could not be made available."""

    CATALOG = "catalog"
    SPACE = "space"
    CHECKSUM = "checksum"
    NETWORK = "network"
    FILESYSTEM = "filesystem"


class ScribeError(Exception):
    """Base exception for Scribe errors."""

    def __init__(self, message: str, code: str = "E_SCRIBE"):
        self.message = message
        self.code = code
        super().__init__(message)


class CacheInitializationError(ScribeError):
    """Raised when the cache directory cannot be prepared."""

    def __init__(self, message: str):
        super().__init__(message, "E_CACHE_INIT")


class DownloadError(ScribeError):
    """Raised when fetching a model artifact fails."""

    def __init__(
        self,
        message: str,
        url: str = "",
        category: FailureCategory = FailureCategory.NETWORK,
    ):
        self.url = url
        self.category = category
        code = "E_FILESYSTEM" if category == FailureCategory.FILESYSTEM else "E_NETWORK"
        super().__init__(message, code)


class DownloadTimeoutError(DownloadError):
    """Raised when a download exceeds its deadline."""


class DownloadCancelledError(DownloadError):
    """Raised when a download is cancelled by its caller."""


class ModelUnavailableError(ScribeError):
    """Raised by model wrappers when a model cannot be acquired."""

    def __init__(self, kind: str, category: FailureCategory | None = None, detail: str = ""):
        self.kind = kind
        self.category = category
        message = f"Failed to load {kind} model"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, "E_MODEL_UNAVAILABLE")
