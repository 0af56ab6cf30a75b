"""Models API routes."""

import asyncio

from fastapi import APIRouter, Depends, HTTPException

from scribe.api.schemas import (
    AvailabilityResponse,
    CacheEntryResponse,
    CacheResponse,
    CatalogModel,
    SuccessResponse,
)
from scribe.api.services import Services, get_services
from scribe.engine.orchestrator import AcquisitionResult
from scribe.errors import ModelUnavailableError
from scribe.models.catalog import ModelKind
from scribe.utils.logging import logger

router = APIRouter(prefix="/models", tags=["models"])


def _parse_kind(kind: str) -> ModelKind:
    try:
        return ModelKind(kind)
    except ValueError:
        raise HTTPException(404, f"Unknown model kind: {kind}") from None


def _availability(result: AcquisitionResult) -> AvailabilityResponse:
    return AvailabilityResponse(
        status="available" if result.available else "unavailable",
        kind=result.kind,
        model_name=result.descriptor.name if result.descriptor else None,
        local_path=str(result.descriptor.local_path) if result.descriptor else None,
        failure=result.failure.value if result.failure else None,
        detail=result.detail,
    )


# ─────────────────────────────────────────────────────────
# ENDPOINTS
# ─────────────────────────────────────────────────────────


@router.get("")
async def list_models(services: Services = Depends(get_services)):
    """List catalog models."""
    orchestrator = services.orchestrator
    cached = orchestrator.cache.entries()
    return {
        "models": [
            CatalogModel(
                name=d.name,
                kind=d.kind.value,
                version=d.version,
                source_url=d.source_url,
                required_bytes=d.required_bytes,
                cached=d.name in cached,
            ).model_dump()
            for d in orchestrator.catalog.list_all()
        ]
    }


@router.get("/cache", response_model=CacheResponse)
async def get_cache(services: Services = Depends(get_services)) -> CacheResponse:
    """Show cache index contents."""
    cache = services.orchestrator.cache
    return CacheResponse(
        entries=[
            CacheEntryResponse(
                name=name,
                cached_path=str(entry.cached_path),
                last_used=entry.last_used,
                size_bytes=entry.size_bytes,
                version=entry.version,
            )
            for name, entry in cache.entries().items()
        ],
        total_bytes=cache.total_bytes(),
    )


@router.post("/cache/clear", response_model=SuccessResponse)
async def clear_cache(services: Services = Depends(get_services)) -> SuccessResponse:
    """Remove every cached model."""
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, services.orchestrator.clear_cache)
    return SuccessResponse(success=True, message="Model cache cleared successfully")


@router.post("/download-all")
async def download_all(services: Services = Depends(get_services)):
    """Acquire every catalog model, best-effort."""
    loop = asyncio.get_running_loop()
    results = await loop.run_in_executor(None, services.orchestrator.download_all)
    return {
        "models": {
            name: _availability(result).model_dump() for name, result in results.items()
        }
    }


@router.get("/loaded")
async def list_loaded(services: Services = Depends(get_services)):
    """List loaded model kinds."""
    return {"loaded": services.model_manager.loaded_models}


@router.get("/{kind}/availability", response_model=AvailabilityResponse)
async def check_availability(
    kind: str, services: Services = Depends(get_services)
) -> AvailabilityResponse:
    """Ensure a model of the given kind is available."""
    model_kind = _parse_kind(kind)
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(None, services.orchestrator.acquire, model_kind)
    return _availability(result)


@router.post("/{kind}/load")
async def load_model(kind: str, services: Services = Depends(get_services)):
    """Acquire and load a model."""
    model_kind = _parse_kind(kind)
    try:
        model = await services.model_manager.load_model(model_kind)
    except ModelUnavailableError as e:
        logger.error(f"Model load failed: kind={kind} error={e.message}")
        raise HTTPException(
            503,
            {
                "message": e.message,
                "failure": e.category.value if e.category else None,
            },
        )

    return {
        "kind": model.kind.value,
        "model_name": model.descriptor.name,
        "local_path": str(model.descriptor.local_path),
    }
