"""Knowledge graph interface for persisting and querying historical claims."""

from typing import List, Optional, Protocol

from ..models.claim import HistoricalClaim


class BackendUnavailableError(ConnectionError):
    """Raised when the underlying graph store cannot be reached."""


class InvalidInputError(ValueError):
    """Raised when a claim identifier is empty or malformed."""


class KnowledgeGraph(Protocol):
    """Protocol for graph stores holding historical claims.

    Absence is never an error: lookups return ``None`` or an empty list.
    Only connectivity or backend failures raise ``BackendUnavailableError``.
    """

    async def initialize(self) -> None:
        """Open the backend connection and prepare the schema."""
        ...

    async def shutdown(self) -> None:
        """Close the backend connection."""
        ...

    async def add_claim(self, claim: HistoricalClaim) -> str:
        """Upsert a claim and its source/context nodes, keyed by claim_id."""
        ...

    async def get_claim(self, claim_id: str) -> Optional[HistoricalClaim]:
        """Get a claim by id, or None if it is unknown."""
        ...

    async def relate_claims(
        self,
        source_claim_id: str,
        target_claim_id: str,
        relationship_type: str,
    ) -> bool:
        """Link two stored claims with a typed relation."""
        ...

    async def get_related(
        self,
        claim_id: str,
        relationship_type: str,
    ) -> List[HistoricalClaim]:
        """Get claims the given claim relates to with the given type."""
        ...

    async def get_by_context_tag(self, context_tag: str) -> List[HistoricalClaim]:
        """Get claims belonging to a cultural context."""
        ...

    async def get_by_source(self, source_description: str) -> List[HistoricalClaim]:
        """Get claims attributed to a source."""
        ...

    @property
    def backend_name(self) -> str:
        """Get the backend name."""
        ...

    @property
    def is_available(self) -> bool:
        """Check if the backend is connected and ready."""
        ...
