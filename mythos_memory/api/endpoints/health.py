"""Health check endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...infrastructure.dependencies import ServiceContainer, get_service_container

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    container: ServiceContainer = Depends(get_service_container),
) -> Dict[str, Any]:
    """Check the health of the knowledge graph backends.

    Returns:
        "healthy" when the configured backend is connected, "degraded"
        otherwise, plus the connection state of every registered backend
    """
    backends = {
        name.title(): connected
        for name, connected in container.graph_factory.backend_status.items()
    }
    return {
        "status": "healthy" if container.graph_connected else "degraded",
        "graph_backend": container.backend_name,
        "graph_backends": backends,
    }
