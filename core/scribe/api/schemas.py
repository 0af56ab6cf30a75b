"""Pydantic models for API request/response schemas."""

from pydantic import BaseModel, ConfigDict


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


class CatalogModel(BaseModel):
    """A catalog model and whether it is cached."""

    name: str
    kind: str
    version: str
    source_url: str
    required_bytes: int
    cached: bool


class CacheEntryResponse(BaseModel):
    """A cache index entry."""

    name: str
    cached_path: str
    last_used: int
    size_bytes: int
    version: str


class CacheResponse(BaseModel):
    """Cache contents."""

    entries: list[CacheEntryResponse]
    total_bytes: int


class AvailabilityResponse(BaseModel):
    """Result of an availability check."""

    model_config = ConfigDict(protected_namespaces=())

    status: str  # "available" | "unavailable"
    kind: str
    model_name: str | None = None
    local_path: str | None = None
    failure: str | None = None
    detail: str = ""


class SuccessResponse(BaseModel):
    """Generic success response."""

    success: bool
    message: str | None = None
