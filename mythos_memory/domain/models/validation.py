"""Domain models for claim validation results."""

from enum import Enum
from typing import Dict, Tuple

from pydantic import BaseModel, Field, field_validator


class ScoreComponent(str, Enum):
    """Names of the sub-scores combined into an overall score."""

    CRYPTOGRAPHIC_SIGNATURE = "cryptographic_signature_valid"
    HISTORICAL_CONSISTENCY = "historical_consistency_score"
    EXPERT_CONSENSUS = "expert_consensus_score"
    NARRATIVE_COHERENCE = "narrative_coherence_score"


class ScoreBreakdown(dict):
    """Read-only mapping of component name to raw sub-score."""

    def _read_only(self, *args, **kwargs):
        raise TypeError("score breakdown is read-only")

    __setitem__ = _read_only
    __delitem__ = _read_only
    __ior__ = _read_only
    clear = _read_only
    pop = _read_only
    popitem = _read_only
    setdefault = _read_only
    update = _read_only

    def __reduce__(self):
        return (ScoreBreakdown, (dict(self),))


class ValidationScore(BaseModel):
    """Snapshot of an integrity evaluation of one claim."""

    overall_score: float = Field(..., ge=0.0, le=1.0, description="Weighted aggregate score")
    confidence: float = Field(..., ge=0.0, le=0.95, description="Confidence in the overall score")
    score_breakdown: Dict[str, float] = Field(
        default_factory=ScoreBreakdown,
        description="Raw sub-score per component name",
    )
    validation_notes: Tuple[str, ...] = Field(
        default=(),
        description="Human-readable notes produced during validation",
    )

    @field_validator("score_breakdown", mode="after")
    @classmethod
    def freeze_breakdown(cls, value: Dict[str, float]) -> ScoreBreakdown:
        """Wrap the validated breakdown so it cannot be changed in place."""
        return ScoreBreakdown(value)

    class Config:
        """Pydantic model configuration."""
        frozen = True  # Immutable model
        json_schema_extra = {
            "example": {
                "overall_score": 0.385,
                "confidence": 0.69625,
                "score_breakdown": {
                    "cryptographic_signature_valid": 0.05,
                    "historical_consistency_score": 0.6,
                    "expert_consensus_score": 0.4,
                    "narrative_coherence_score": 0.6,
                },
                "validation_notes": ["Validated claim: claim_redlining_001"],
            }
        }
