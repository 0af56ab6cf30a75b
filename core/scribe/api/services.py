"""Shared service instances for API routes."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from scribe.engine.model_manager import ModelManager
from scribe.engine.orchestrator import AcquisitionOrchestrator, build_orchestrator


@dataclass
class Services:
    """Components shared by the API routes."""

    orchestrator: AcquisitionOrchestrator
    model_manager: ModelManager


services: Optional[Services] = None


def init_services(data_dir: Path | None = None) -> Services:
    """Build the services and install them as the shared instance."""
    global services
    orchestrator = build_orchestrator(data_dir)
    services = Services(
        orchestrator=orchestrator,
        model_manager=ModelManager(orchestrator),
    )
    return services


def get_services() -> Services:
    """Get or create the shared services."""
    if services is None:
        return init_services()
    return services
