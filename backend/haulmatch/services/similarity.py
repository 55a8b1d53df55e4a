"""Cosine similarity between embedding vectors."""

import math
from collections.abc import Sequence


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Calculate cosine similarity between two vectors.

    Returns 0.0 instead of raising for vectors of different lengths, empty
    vectors, zero-magnitude vectors, or non-finite results.

    Args:
        a: First vector.
        b: Second vector.

    Returns:
        Similarity in [-1, 1].
    """
    if len(a) == 0 or len(a) != len(b):
        return 0.0

    dot = sum(x * y for x, y in zip(a, b, strict=True))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    similarity = dot / (norm_a * norm_b)
    if not math.isfinite(similarity):
        return 0.0
    # Clamp float drift
    return max(-1.0, min(1.0, similarity))
