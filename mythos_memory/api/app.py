"""FastAPI application for the Mythos Memory Core service."""

import contextlib
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..domain.ports.knowledge_graph import BackendUnavailableError, InvalidInputError
from ..infrastructure.dependencies import get_service_container
from .endpoints import claims, health

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect the knowledge graph on startup and release it on shutdown."""
    container = get_service_container()
    try:
        await container.get_claim_service()
    except BackendUnavailableError as e:
        logger.warning(f"⚠️ Knowledge graph not ready at startup: {e}")

    yield  # Application runs here

    await container.shutdown()


# Create FastAPI application
app = FastAPI(
    title="Mythos Memory Core API",
    description="Integrity scoring and knowledge graph storage for historical claims",
    version="0.1.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BackendUnavailableError)
async def backend_unavailable_handler(request: Request, exc: BackendUnavailableError) -> JSONResponse:
    """Report an unreachable graph store as 503, wherever it was raised."""
    logger.error(f"❌ Knowledge graph unavailable during {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": f"Knowledge graph unavailable: {exc}"})


@app.exception_handler(InvalidInputError)
async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    """Report a rejected identifier as 422."""
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# Include routers
app.include_router(health.router)
app.include_router(claims.router)
