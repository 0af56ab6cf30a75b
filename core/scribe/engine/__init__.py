"""Engine module - model acquisition and lifecycle."""

from scribe.engine.model_manager import (
    ModelManager,
    SummarizationModel,
    TranscriptionModel,
    initialize_model,
)
from scribe.engine.orchestrator import (
    AcquisitionOrchestrator,
    AcquisitionResult,
    AcquisitionState,
    build_orchestrator,
)

__all__ = [
    "ModelManager",
    "SummarizationModel",
    "TranscriptionModel",
    "initialize_model",
    "AcquisitionOrchestrator",
    "AcquisitionResult",
    "AcquisitionState",
    "build_orchestrator",
]
