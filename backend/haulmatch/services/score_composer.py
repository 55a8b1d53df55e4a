"""Combine a rules-only result with the semantic similarity bonus."""

from collections.abc import Sequence
from dataclasses import replace
from typing import Literal

from haulmatch.services.feature_extraction import DRIVER_PROFILE_FIELDS
from haulmatch.services.match_types import (
    OVERALL_MAX_SCORE,
    SEMANTIC_MAX_SCORE,
    MatchResult,
)
from haulmatch.services.similarity import cosine_similarity

Confidence = Literal["high", "medium", "low"]

# Share of the profile checklist a driver must have filled in
HIGH_CONFIDENCE_COMPLETENESS = 0.78
MEDIUM_CONFIDENCE_COMPLETENESS = 0.42


def semantic_points(similarity: float) -> int:
    """Map cosine similarity to 0-10 points. Negative similarity scores 0."""
    return round(max(0.0, similarity) * SEMANTIC_MAX_SCORE)


def compose_match(
    result: MatchResult,
    embedding_a: Sequence[float] | None,
    embedding_b: Sequence[float] | None,
) -> MatchResult:
    """Return a copy of result with the semantic layer applied.

    With both embeddings present, the semantic score is added to the rules
    score (capped at 100). Otherwise the result is marked degraded and the
    overall score equals the rules score. The rules fields, breakdown and
    reasons are never changed, so composing twice gives the same answer.

    Args:
        result: Output of a rule scorer.
        embedding_a: Vector for one side of the pair, or None.
        embedding_b: Vector for the other side, or None.
    """
    if embedding_a is None or embedding_b is None:
        return replace(
            result,
            overall_score=result.rules_score,
            semantic_score=None,
            degraded_mode=True,
        )

    semantic = semantic_points(cosine_similarity(embedding_a, embedding_b))
    return replace(
        result,
        overall_score=min(result.rules_score + semantic, OVERALL_MAX_SCORE),
        semantic_score=semantic,
        degraded_mode=False,
    )


def derive_confidence(
    missing_fields: Sequence[str], semantic_score: int | None
) -> Confidence:
    """Grade how much a driver-job score can be trusted.

    Completeness is the share of the driver profile checklist that is filled
    in. A semantic score counts as a second signal.

    Returns:
        "high" for a mostly complete profile with a semantic score, "medium"
        for a half complete profile or any semantic score, "low" otherwise.
    """
    total = len(DRIVER_PROFILE_FIELDS)
    completeness = min(max((total - len(missing_fields)) / total, 0.0), 1.0)
    has_signal = semantic_score is not None

    if completeness >= HIGH_CONFIDENCE_COMPLETENESS and has_signal:
        return "high"
    if completeness >= MEDIUM_CONFIDENCE_COMPLETENESS or has_signal:
        return "medium"
    return "low"
