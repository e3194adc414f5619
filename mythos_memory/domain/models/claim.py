"""Domain models for historical claims and their provenance."""

from typing import Optional, Tuple

from pydantic import BaseModel, Field

MAX_TIMESTAMP = 2**64 - 1


class ProvenanceData(BaseModel):
    """Authorship, timing and optional attestation attached to a claim."""

    document_id: str = Field(..., description="Identifier of the source document")
    author_id: str = Field(..., description="Identifier of the author")
    timestamp: int = Field(
        ...,
        ge=0,
        le=MAX_TIMESTAMP,
        description="Epoch seconds, no timezone semantics",
    )
    cryptographic_signature: Optional[str] = Field(
        None, description="Signature over the document, if one was supplied"
    )

    @property
    def has_signature(self) -> bool:
        """Whether a non-empty signature is attached."""
        return bool(self.cryptographic_signature)

    class Config:
        """Pydantic model configuration."""
        frozen = True


class HistoricalClaim(BaseModel):
    """A discrete historical assertion with supporting provenance."""

    claim_id: str = Field(..., description="Caller-assigned unique identifier")
    narrative_content: str = Field(..., description="Text of the claim")
    source_description: str = Field(..., description="Where the claim comes from")
    cultural_context_tags: Tuple[str, ...] = Field(
        default=(),
        description="Ordered context tags, duplicates permitted",
    )
    provenance: ProvenanceData = Field(..., description="Provenance of the claim")

    class Config:
        """Pydantic model configuration."""
        frozen = True  # Immutable model
        json_schema_extra = {
            "example": {
                "claim_id": "claim_redlining_001",
                "narrative_content": "Redlining policies restricted mortgage lending in minority neighbourhoods.",
                "source_description": "Redlining policies (1930s-1960s) documented in National Archives",
                "cultural_context_tags": ["urban_surveillance", "housing"],
                "provenance": {
                    "document_id": "doc_nara_1938_07",
                    "author_id": "archivist_042",
                    "timestamp": 1678886400,
                    "cryptographic_signature": None,
                },
            }
        }
