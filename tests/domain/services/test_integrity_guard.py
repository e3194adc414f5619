"""Tests for the basic integrity guard."""

import pytest

from mythos_memory.domain.models.validation import ScoreComponent
from mythos_memory.domain.services.integrity_guard import (
    BasicIntegrityGuard,
    clamp_unit,
    consistency_score,
    expert_consensus_score,
    narrative_coherence_score,
    stable_hash,
)

BREAKDOWN_KEYS = {
    "cryptographic_signature_valid",
    "historical_consistency_score",
    "expert_consensus_score",
    "narrative_coherence_score",
}

LONG_NARRATIVE = (
    "Historical records show that the housing policy of the period denied "
    "equal rights to residents of redlined districts, a pattern documented "
    "across decades of municipal archives and federal lending maps."
)


def test_basic_validation(guard: BasicIntegrityGuard, claim_factory):
    """Test scoring a signed claim."""
    score = guard.validate(claim_factory(signature="dummy_sig"))

    assert 0.0 < score.overall_score <= 1.0
    assert len(score.score_breakdown) == 4
    assert set(score.score_breakdown) == BREAKDOWN_KEYS
    assert score.validation_notes == ("Validated claim: test_claim_001",)


def test_validation_no_signature(guard: BasicIntegrityGuard, claim_factory):
    """Test that a missing signature scores low."""
    score = guard.validate(claim_factory(signature=None))

    assert score.score_breakdown["cryptographic_signature_valid"] == pytest.approx(0.05)


def test_empty_signature_counts_as_absent(guard: BasicIntegrityGuard, claim_factory):
    """Test that an empty signature string is not a signature."""
    score = guard.validate(claim_factory(signature=""))

    assert score.score_breakdown["cryptographic_signature_valid"] == pytest.approx(0.05)


def test_short_unsigned_claim_scenario(guard: BasicIntegrityGuard, claim_factory):
    """Test a 17 character narrative with no signature and no keywords."""
    claim = claim_factory(narrative_content="A test narrative.")
    score = guard.validate(claim)
    breakdown = score.score_breakdown
    expected_expert = 0.4 + (stable_hash(claim.claim_id) % 4) / 10.0

    assert len(claim.narrative_content) == 17
    assert breakdown["historical_consistency_score"] == pytest.approx(0.50)
    assert breakdown["cryptographic_signature_valid"] == pytest.approx(0.05)
    assert breakdown["narrative_coherence_score"] == pytest.approx(0.60)
    assert breakdown["expert_consensus_score"] == pytest.approx(expected_expert)

    expected_overall = 0.05 * 0.30 + 0.50 * 0.25 + expected_expert * 0.25 + 0.60 * 0.20
    assert score.overall_score == pytest.approx(expected_overall)
    assert score.confidence == pytest.approx(0.60 + expected_overall * 0.25)


def test_long_signed_claim_with_keywords_scenario(guard: BasicIntegrityGuard, claim_factory):
    """Test a long signed narrative mentioning every coherence keyword."""
    claim = claim_factory(narrative_content=LONG_NARRATIVE, signature="archive_sig")
    breakdown = guard.validate(claim).score_breakdown

    assert len(LONG_NARRATIVE) >= 150
    assert breakdown["historical_consistency_score"] == pytest.approx(0.70)
    assert breakdown["narrative_coherence_score"] == pytest.approx(0.75)
    assert breakdown["cryptographic_signature_valid"] == pytest.approx(0.95)


@pytest.mark.parametrize(
    "length, expected",
    [
        (0, 0.50),
        (49, 0.50),
        (50, 0.60),
        (149, 0.60),
        (150, 0.70),
        (5000, 0.70),
    ],
)
def test_consistency_bands(claim_factory, length: int, expected: float):
    """Test the half-open narrative length bands."""
    claim = claim_factory(narrative_content="x" * length)

    assert consistency_score(claim) == pytest.approx(expected)


@pytest.mark.parametrize(
    "narrative, expected",
    [
        ("Nothing notable here.", 0.60),
        ("A POLICY was enacted.", 0.65),
        ("Policy and civil rights.", 0.70),
        ("Historical policy on rights.", 0.75),
        ("historical historical historical", 0.65),
    ],
)
def test_narrative_coherence_keywords(claim_factory, narrative: str, expected: float):
    """Test keyword bonuses are case-insensitive, counted once each and capped."""
    claim = claim_factory(narrative_content=narrative)

    assert narrative_coherence_score(claim) == pytest.approx(expected)


def test_narrative_coherence_never_exceeds_cap(claim_factory):
    """Test that all keywords present stays at the cap."""
    claim = claim_factory(narrative_content="rights policy historical " * 10)

    assert narrative_coherence_score(claim) <= 0.75


def test_stable_hash_is_fixed():
    """Test the hash is a fixed 64-bit function of the identifier."""
    assert stable_hash("test_claim_001") == 0x8CE9BB2CD34EC0FC
    assert stable_hash("test_claim_002") == 0x529AE7D69A908B6F
    assert 0 <= stable_hash("") < 2**64


@pytest.mark.parametrize(
    "claim_id, expected",
    [
        ("test_claim_001", 0.4),
        ("test_claim_002", 0.7),
        ("alpha", 0.6),
        ("gamma", 0.5),
    ],
)
def test_expert_consensus_buckets(claim_factory, claim_id: str, expected: float):
    """Test the hash bucket bonus for known identifiers."""
    assert expert_consensus_score(claim_factory(claim_id=claim_id)) == pytest.approx(expected)


def test_validation_is_deterministic(guard: BasicIntegrityGuard, claim_factory):
    """Test that scoring the same claim twice yields identical results."""
    claim = claim_factory(narrative_content=LONG_NARRATIVE, signature="sig")

    first = guard.validate(claim)
    second = BasicIntegrityGuard().validate(claim)

    assert first == second
    assert first.model_dump_json() == second.model_dump_json()


def test_signature_monotonicity(guard: BasicIntegrityGuard, claim_factory):
    """Test a signed claim never scores below the same claim unsigned."""
    signed = guard.validate(claim_factory(signature="sig"))
    unsigned = guard.validate(claim_factory(signature=None))
    key = ScoreComponent.CRYPTOGRAPHIC_SIGNATURE.value

    assert signed.score_breakdown[key] > unsigned.score_breakdown[key]
    assert signed.overall_score >= unsigned.overall_score


@pytest.mark.parametrize("claim_id", ["", "a", "test_claim_001", "ünïcødé-id", "x" * 1000])
@pytest.mark.parametrize("narrative", ["", "policy", LONG_NARRATIVE, "rights " * 400])
@pytest.mark.parametrize("signature", [None, "sig"])
def test_scores_stay_in_range(guard: BasicIntegrityGuard, claim_factory, claim_id, narrative, signature):
    """Test score and confidence ranges hold for varied claims."""
    score = guard.validate(
        claim_factory(claim_id=claim_id, narrative_content=narrative, signature=signature)
    )

    assert 0.0 <= score.overall_score <= 1.0
    assert 0.0 <= score.confidence <= 0.95
    assert set(score.score_breakdown) == BREAKDOWN_KEYS


@pytest.mark.parametrize("value, expected", [(-0.5, 0.0), (0.3, 0.3), (1.7, 1.0)])
def test_clamp_unit(value: float, expected: float):
    """Test clamping into the unit interval."""
    assert clamp_unit(value) == expected
