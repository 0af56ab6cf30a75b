"""Scribe Core - FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scribe import __version__
from scribe.api import services as service_store
from scribe.api.routes import models
from scribe.api.schemas import HealthResponse
from scribe.config import API_PREFIX, HOST, LOG_FORMAT, PORT
from scribe.utils.logging import logger

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format=LOG_FORMAT,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info(f"Scribe Core v{__version__} starting...")
    if service_store.services is None:
        service_store.init_services()
    logger.info(f"Server running at http://{HOST}:{PORT}")
    yield
    logger.info("Scribe Core stopped")


app = FastAPI(
    title="Scribe Core",
    description="Local model cache and acquisition for Scribe",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routes
app.include_router(models.router, prefix=API_PREFIX)


@app.get(f"{API_PREFIX}/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="ok", version=__version__)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=HOST, port=PORT)
