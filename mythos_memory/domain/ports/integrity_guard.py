"""Protocol for claim integrity guards."""

from typing import Protocol

from ..models.claim import HistoricalClaim
from ..models.validation import ValidationScore


class IntegrityGuard(Protocol):
    """Protocol defining the interface for historical claim scorers."""

    def validate(self, claim: HistoricalClaim) -> ValidationScore:
        """Score a claim. Must never raise."""
        ...
