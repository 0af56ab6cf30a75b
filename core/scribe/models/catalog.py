"""
Catalog of the models Scribe knows how to acquire.
Built once per process and never mutated afterwards.
"""

from enum import Enum
from pathlib import Path
from typing import Iterable, Optional

from huggingface_hub import hf_hub_url
from pydantic import BaseModel, ConfigDict

from scribe.config import MODELS_DIR
from scribe.utils.logging import logger


class ModelKind(str, Enum):
    """The kinds of model the application consumes."""

    TRANSCRIPTION = "transcription"
    SUMMARIZATION = "summarization"


class ModelDescriptor(BaseModel):
    """Static metadata for a downloadable model artifact."""

    model_config = ConfigDict(frozen=True)

    name: str  # Unique key: "whisper-small"
    kind: ModelKind
    source_url: str
    expected_checksum: str = ""  # Empty means unverified
    local_path: Path
    version: str
    required_bytes: int  # Minimum free space before downloading


def default_descriptors(models_dir: Path) -> list[ModelDescriptor]:
    """The models shipped with the application."""
    return [
        ModelDescriptor(
            name="whisper-small",
            kind=ModelKind.TRANSCRIPTION,
            source_url=hf_hub_url("ggerganov/whisper.cpp", "ggml-small.bin"),
            local_path=models_dir / "whisper-small.bin",
            version="1.0.0",
            required_bytes=500 * 1024 * 1024,
        ),
        ModelDescriptor(
            name="distilbart-summarization",
            kind=ModelKind.SUMMARIZATION,
            source_url=hf_hub_url("facebook/bart-large-cnn", "pytorch_model.bin"),
            local_path=models_dir / "summarization-model.bin",
            version="1.0.0",
            required_bytes=1024 * 1024 * 1024,
        ),
    ]


class ModelCatalog:
    """
    Read-only registry of model descriptors.

    Descriptors are built lazily on first access and kept for the
    lifetime of the catalog.
    """

    def __init__(
        self,
        models_dir: Path | None = None,
        descriptors: Optional[Iterable[ModelDescriptor]] = None,
    ):
        self.models_dir = models_dir or MODELS_DIR
        self._seed = list(descriptors) if descriptors is not None else None
        self._descriptors: Optional[list[ModelDescriptor]] = None

    def _load(self) -> list[ModelDescriptor]:
        if self._descriptors is None:
            self.models_dir.mkdir(parents=True, exist_ok=True)
            descriptors = (
                self._seed if self._seed is not None else default_descriptors(self.models_dir)
            )

            names = [d.name for d in descriptors]
            if len(names) != len(set(names)):
                raise ValueError(f"Duplicate model names in catalog: {names}")

            self._descriptors = descriptors
            logger.info(f"Loaded model catalog: {len(descriptors)} models")
        return self._descriptors

    def list_all(self) -> list[ModelDescriptor]:
        """List every descriptor in catalog order."""
        return list(self._load())

    def get(self, name: str) -> Optional[ModelDescriptor]:
        """Get a descriptor by model name."""
        for descriptor in self._load():
            if descriptor.name == name:
                return descriptor
        return None

    def find_by_kind(self, kind: ModelKind | str) -> Optional[ModelDescriptor]:
        """Return the first descriptor of the given kind."""
        try:
            kind = ModelKind(kind)
        except ValueError:
            return None

        for descriptor in self._load():
            if descriptor.kind == kind:
                return descriptor
        return None
