"""Model manager for loading and tracking acquired models."""

import asyncio
from dataclasses import dataclass
from typing import ClassVar, Union

from scribe.engine.orchestrator import AcquisitionOrchestrator
from scribe.errors import ModelUnavailableError
from scribe.models.catalog import ModelDescriptor, ModelKind
from scribe.utils.logging import logger


@dataclass(frozen=True)
class _LoadedModel:
    descriptor: ModelDescriptor

    kind: ClassVar[ModelKind]

    def validate(self) -> None:
        """Check the artifact is still on disk."""
        if not self.descriptor.local_path.is_file():
            raise ModelUnavailableError(
                self.kind.value, detail=f"artifact missing at {self.descriptor.local_path}"
            )


@dataclass(frozen=True)
class TranscriptionModel(_LoadedModel):
    kind: ClassVar[ModelKind] = ModelKind.TRANSCRIPTION


@dataclass(frozen=True)
class SummarizationModel(_LoadedModel):
    kind: ClassVar[ModelKind] = ModelKind.SUMMARIZATION


LoadedModel = Union[TranscriptionModel, SummarizationModel]

_VARIANTS: dict[ModelKind, type] = {
    ModelKind.TRANSCRIPTION: TranscriptionModel,
    ModelKind.SUMMARIZATION: SummarizationModel,
}


def initialize_model(kind: ModelKind | str, orchestrator: AcquisitionOrchestrator) -> LoadedModel:
    """
    Acquire a model and wrap it in its kind's variant.

    Raises:
        ModelUnavailableError: The kind is unknown or acquisition failed
    """
    try:
        kind = ModelKind(kind)
    except ValueError:
        raise ModelUnavailableError(str(kind), detail="unknown model kind") from None

    result = orchestrator.acquire(kind)
    if not result.available:
        raise ModelUnavailableError(kind.value, result.failure, result.detail)

    model = _VARIANTS[kind](descriptor=result.descriptor)
    model.validate()
    logger.info(f"ML model initialized: name={result.descriptor.name} kind={kind.value}")
    return model


class ModelManager:
    """Tracks which model kinds have been acquired and wrapped."""

    def __init__(self, orchestrator: AcquisitionOrchestrator) -> None:
        self.orchestrator = orchestrator
        self._loaded_models: dict[ModelKind, LoadedModel] = {}
        self._lock = asyncio.Lock()

    async def load_model(self, kind: ModelKind | str) -> LoadedModel:
        """Load a model, acquiring it first if necessary.

        Args:
            kind: The model kind to load

        Returns:
            The loaded model wrapper

        Raises:
            ModelUnavailableError: The model could not be acquired
        """
        async with self._lock:
            loop = asyncio.get_running_loop()
            model = await loop.run_in_executor(
                None, initialize_model, kind, self.orchestrator
            )
            self._loaded_models[model.kind] = model
            return model

    async def unload_model(self, kind: ModelKind | str) -> bool:
        """Forget a loaded model.

        Returns:
            True if it was loaded, False otherwise
        """
        try:
            kind = ModelKind(kind)
        except ValueError:
            return False

        async with self._lock:
            if kind in self._loaded_models:
                del self._loaded_models[kind]
                logger.info(f"Unloaded model: kind={kind.value}")
                return True
            return False

    def get(self, kind: ModelKind | str) -> LoadedModel | None:
        """Get a loaded model, if any."""
        try:
            return self._loaded_models.get(ModelKind(kind))
        except ValueError:
            return None

    def is_loaded(self, kind: ModelKind | str) -> bool:
        """Check if a model kind is currently loaded."""
        return self.get(kind) is not None

    @property
    def loaded_models(self) -> list[str]:
        """Get list of currently loaded model kinds."""
        return [kind.value for kind in self._loaded_models]
