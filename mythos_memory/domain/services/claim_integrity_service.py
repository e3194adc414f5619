"""Service coordinating claim scoring and knowledge graph persistence."""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.claim import HistoricalClaim
from ..models.validation import ValidationScore
from ..ports.integrity_guard import IntegrityGuard
from ..ports.knowledge_graph import InvalidInputError, KnowledgeGraph

logger = logging.getLogger(__name__)


class ClaimIngestionResult(BaseModel):
    """Outcome of scoring and storing a claim."""

    claim_id: str = Field(..., description="Identifier the graph stored the claim under")
    score: ValidationScore = Field(..., description="Score computed before persisting")

    class Config:
        """Pydantic model configuration."""
        frozen = True


class ClaimIntegrityService:
    """Service for validating claims and keeping them in the knowledge graph."""

    def __init__(self, guard: IntegrityGuard, graph: KnowledgeGraph):
        """Initialize the service.

        Args:
            guard: Scorer used for every claim
            graph: Knowledge graph backend
        """
        self.guard = guard
        self.graph = graph
        logger.info(f"🔧 ClaimIntegrityService initialized with {graph.backend_name} backend")

    def validate_claim(self, claim: HistoricalClaim) -> ValidationScore:
        """Score a claim without persisting it."""
        return self.guard.validate(claim)

    async def ingest_claim(self, claim: HistoricalClaim) -> ClaimIngestionResult:
        """Score a claim and upsert it into the knowledge graph.

        The score is returned to the caller only; it is not stored.

        Args:
            claim: Claim to ingest

        Returns:
            Stored claim id and its score

        Raises:
            InvalidInputError: If the claim id is empty
            BackendUnavailableError: If the graph store cannot be reached
        """
        if not claim.claim_id.strip():
            raise InvalidInputError("claim_id must not be empty")

        score = self.guard.validate(claim)
        logger.info(f"📝 Claim {claim.claim_id} scored {score.overall_score:.2f}, persisting...")
        claim_id = await self.graph.add_claim(claim)
        logger.info(f"✅ Claim {claim_id} stored")
        return ClaimIngestionResult(claim_id=claim_id, score=score)

    async def get_claim(self, claim_id: str) -> Optional[HistoricalClaim]:
        """Get a stored claim by id."""
        return await self.graph.get_claim(claim_id)

    async def relate_claims(
        self,
        source_claim_id: str,
        target_claim_id: str,
        relationship_type: str,
    ) -> bool:
        """Link two stored claims.

        Raises:
            InvalidInputError: If the relationship type is blank
        """
        if not relationship_type.strip():
            raise InvalidInputError("relationship_type must not be empty")
        return await self.graph.relate_claims(source_claim_id, target_claim_id, relationship_type)

    async def get_related_claims(
        self,
        claim_id: str,
        relationship_type: str,
    ) -> List[HistoricalClaim]:
        """Get claims related to a claim by the given relation type."""
        return await self.graph.get_related(claim_id, relationship_type)

    async def get_claims_by_context(self, context_tag: str) -> List[HistoricalClaim]:
        """Get claims tagged with a cultural context."""
        return await self.graph.get_by_context_tag(context_tag)

    async def get_claims_by_source(self, source_description: str) -> List[HistoricalClaim]:
        """Get claims attributed to a source."""
        return await self.graph.get_by_source(source_description)
