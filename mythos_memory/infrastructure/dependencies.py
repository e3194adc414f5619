"""Dependency injection configuration for hexagonal architecture."""

import asyncio
import logging
import os
from functools import lru_cache
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from fastapi import Depends

from ..domain.ports.integrity_guard import IntegrityGuard
from ..domain.services.claim_integrity_service import ClaimIntegrityService
from ..domain.services.integrity_guard import BasicIntegrityGuard
from .graph.factory import KnowledgeGraphFactory
from .graph.sqlite_adapter import GraphStoreConfig

# Load environment variables from .env file if it exists
load_dotenv()

logger = logging.getLogger(__name__)


def graph_store_config_from_env() -> GraphStoreConfig:
    """Build the graph store configuration from environment variables."""
    defaults = GraphStoreConfig()
    return GraphStoreConfig(
        db_path=os.getenv("MYTHOS_GRAPH_DB_PATH", defaults.db_path),
        timeout=float(os.getenv("MYTHOS_GRAPH_TIMEOUT", defaults.timeout)),
    )


class ServiceContainer:
    """Service container for dependency injection."""

    def __init__(
        self,
        graph_factory: Optional[KnowledgeGraphFactory] = None,
        backend_name: Optional[str] = None,
        guard: Optional[IntegrityGuard] = None,
    ):
        """Initialize service container.

        Args:
            graph_factory: Registry owning the knowledge graph connections
            backend_name: Registered backend to use, defaults to MYTHOS_GRAPH_BACKEND
            guard: Claim scorer, defaults to BasicIntegrityGuard
        """
        self.graph_factory = graph_factory or KnowledgeGraphFactory()
        self.backend_name = backend_name or os.getenv("MYTHOS_GRAPH_BACKEND", "sqlite")
        self.guard: IntegrityGuard = guard or BasicIntegrityGuard()
        self._claim_service: Optional[ClaimIntegrityService] = None
        self._service_lock = asyncio.Lock()

    def _backend_config(self) -> Dict[str, Any]:
        if self.backend_name == "sqlite":
            return {"config": graph_store_config_from_env()}
        return {}

    async def get_claim_service(self) -> ClaimIntegrityService:
        """Get the claim service, connecting the graph backend on first use.

        If the backend has dropped since, the service is rebuilt over a
        fresh connection.

        Raises:
            BackendUnavailableError: If the graph store cannot be reached
        """
        async with self._service_lock:
            service = self._claim_service
            if service is None or not service.graph.is_available:
                logger.info(f"🔧 Creating ClaimIntegrityService with {self.backend_name} backend...")
                graph = await self.graph_factory.connect_backend(
                    self.backend_name, **self._backend_config()
                )
                service = ClaimIntegrityService(self.guard, graph)
                self._claim_service = service
            return service

    @property
    def graph_connected(self) -> bool:
        """Whether the configured backend currently has a live connection."""
        return self.graph_factory.get_backend(self.backend_name) is not None

    async def shutdown(self) -> None:
        """Release backend connections."""
        async with self._service_lock:
            await self.graph_factory.disconnect_all()
            self._claim_service = None


# Global service container instance
@lru_cache()
def get_service_container() -> ServiceContainer:
    """Get global service container instance."""
    return ServiceContainer()


def get_integrity_guard(
    container: ServiceContainer = Depends(get_service_container),
) -> IntegrityGuard:
    """FastAPI dependency for the integrity guard."""
    return container.guard


async def get_claim_service(
    container: ServiceContainer = Depends(get_service_container),
) -> ClaimIntegrityService:
    """FastAPI dependency for the claim service."""
    return await container.get_claim_service()
