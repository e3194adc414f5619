"""Registry of knowledge graph backends and their live connections."""

import asyncio
import logging
from typing import Any, Dict, Optional, Type

from ...domain.ports.knowledge_graph import BackendUnavailableError, KnowledgeGraph
from .sqlite_adapter import SQLiteKnowledgeGraph

logger = logging.getLogger(__name__)


class KnowledgeGraphFactory:
    """Registry of graph store classes, holding at most one live connection each.

    ``connect_backend`` is get-or-connect: a backend that is already connected
    is returned as is, so concurrent callers share one store connection
    instead of opening competing ones.
    """

    def __init__(self):
        """Initialize the registry with the SQLite store."""
        self._backend_classes: Dict[str, Type[KnowledgeGraph]] = {}
        self._connected: Dict[str, KnowledgeGraph] = {}
        self._connect_lock = asyncio.Lock()

        self.register_backend("sqlite", SQLiteKnowledgeGraph)

    def register_backend(self, name: str, backend_class: Type[KnowledgeGraph]) -> None:
        """Register a graph store class under a name.

        Raises:
            ValueError: If the name is taken
        """
        if name in self._backend_classes:
            raise ValueError(f"Backend {name} already registered")
        self._backend_classes[name] = backend_class

    async def connect_backend(self, name: str, **config: Any) -> KnowledgeGraph:
        """Return the live backend for a name, connecting it if needed.

        ``config`` is only used when a new connection is opened.

        Raises:
            ValueError: If the name is not registered
            BackendUnavailableError: If the store cannot be reached
        """
        if name not in self._backend_classes:
            raise ValueError(f"Backend {name} not registered")

        async with self._connect_lock:
            backend = self.get_backend(name)
            if backend is not None:
                return backend

            # A backend closed outside the registry is replaced.
            self._connected.pop(name, None)
            backend = self._backend_classes[name](**config)
            try:
                await backend.initialize()
            except BackendUnavailableError as e:
                logger.warning(f"⚠️ Graph backend {name} unreachable: {e}")
                raise
            self._connected[name] = backend
            logger.info(f"✅ Graph backend connected: {name}")
            return backend

    def get_backend(self, name: str) -> Optional[KnowledgeGraph]:
        """Get the backend for a name if it is connected, else None."""
        backend = self._connected.get(name)
        if backend is not None and backend.is_available:
            return backend
        return None

    async def disconnect_backend(self, name: str) -> None:
        """Close and forget the connection for a name, if any."""
        backend = self._connected.pop(name, None)
        if backend is not None:
            await backend.shutdown()
            logger.info(f"Graph backend disconnected: {name}")

    async def disconnect_all(self) -> None:
        """Close every open connection."""
        for name in list(self._connected):
            await self.disconnect_backend(name)

    @property
    def backend_status(self) -> Dict[str, bool]:
        """Connection state of every registered backend."""
        return {
            name: self.get_backend(name) is not None
            for name in self._backend_classes
        }
