"""Historical claim API endpoints.

Graph store failures and rejected identifiers are turned into 503 and 422
responses by the application's exception handlers.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from ...domain.models.claim import HistoricalClaim
from ...domain.models.validation import ValidationScore
from ...domain.ports.integrity_guard import IntegrityGuard
from ...domain.services.claim_integrity_service import ClaimIngestionResult, ClaimIntegrityService
from ...infrastructure.dependencies import get_claim_service, get_integrity_guard

logger = logging.getLogger(__name__)

router = APIRouter(tags=["claims"])


class RelationRequest(BaseModel):
    """Request model for linking two claims."""

    target_claim_id: str = Field(..., description="Claim the relation points to")
    relationship_type: str = Field(..., description="Relation label, e.g. SUPPORTS")


class RelationResponse(BaseModel):
    """Response model for a created relation."""

    source_claim_id: str
    target_claim_id: str
    relationship_type: str


@router.post("/claims/validate", response_model=ValidationScore)
async def validate_claim(
    claim: HistoricalClaim,
    guard: IntegrityGuard = Depends(get_integrity_guard),
) -> ValidationScore:
    """Score a claim without storing it."""
    return guard.validate(claim)


@router.post("/claims", response_model=ClaimIngestionResult, status_code=201)
async def ingest_claim(
    claim: HistoricalClaim,
    service: ClaimIntegrityService = Depends(get_claim_service),
) -> ClaimIngestionResult:
    """Score a claim and store it in the knowledge graph."""
    return await service.ingest_claim(claim)


@router.get("/claims/{claim_id}", response_model=HistoricalClaim)
async def get_claim(
    claim_id: str,
    service: ClaimIntegrityService = Depends(get_claim_service),
) -> HistoricalClaim:
    """Get a stored claim.

    Raises:
        HTTPException: 404 if the claim is unknown
    """
    claim = await service.get_claim(claim_id)
    if claim is None:
        raise HTTPException(status_code=404, detail=f"Claim not found: {claim_id}")
    return claim


@router.post("/claims/{claim_id}/relations", response_model=RelationResponse, status_code=201)
async def relate_claims(
    claim_id: str,
    request: RelationRequest,
    service: ClaimIntegrityService = Depends(get_claim_service),
) -> RelationResponse:
    """Link a stored claim to another stored claim."""
    linked = await service.relate_claims(
        claim_id, request.target_claim_id, request.relationship_type
    )
    if not linked:
        raise HTTPException(
            status_code=404,
            detail=f"Claim not found: {claim_id} or {request.target_claim_id}",
        )
    logger.info(f"🔗 {claim_id} -[{request.relationship_type}]-> {request.target_claim_id}")
    return RelationResponse(
        source_claim_id=claim_id,
        target_claim_id=request.target_claim_id,
        relationship_type=request.relationship_type,
    )


@router.get("/claims/{claim_id}/related", response_model=List[HistoricalClaim])
async def get_related_claims(
    claim_id: str,
    relationship_type: str = Query(..., description="Relation label, e.g. SUPPORTS"),
    service: ClaimIntegrityService = Depends(get_claim_service),
) -> List[HistoricalClaim]:
    """Get claims related to a claim. Unknown claims yield an empty list."""
    return await service.get_related_claims(claim_id, relationship_type)


@router.get("/contexts/{context_tag}/claims", response_model=List[HistoricalClaim])
async def get_claims_by_context(
    context_tag: str,
    service: ClaimIntegrityService = Depends(get_claim_service),
) -> List[HistoricalClaim]:
    """Get claims tagged with a cultural context."""
    return await service.get_claims_by_context(context_tag)


@router.get("/sources/claims", response_model=List[HistoricalClaim])
async def get_claims_by_source(
    source_description: str = Query(..., description="Exact source description"),
    service: ClaimIntegrityService = Depends(get_claim_service),
) -> List[HistoricalClaim]:
    """Get claims attributed to a source."""
    return await service.get_claims_by_source(source_description)
