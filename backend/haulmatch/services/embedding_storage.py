"""Embedding storage helpers.

Provides:
- Entity type enum for the persistent embedding cache
- Content hash computation for staleness detection
"""

import hashlib
from enum import Enum

# =============================================================================
# Entity Types
# =============================================================================


class EmbeddingEntityType(str, Enum):
    """Kinds of entities whose text blocks are embedded.

    Values:
        DRIVER: Driver profile merged with the latest application.
        JOB: Job posting.
        APPLICATION: Application as a company-side candidate.
        LEAD: Lead as a company-side candidate.
    """

    DRIVER = "driver"
    JOB = "job"
    APPLICATION = "application"
    LEAD = "lead"


# =============================================================================
# Content Hash
# =============================================================================


def compute_content_hash(text: str) -> str:
    """Compute the SHA-256 hash of a text block.

    Stored next to each embedding so a changed text block is detected
    without calling the provider.

    Args:
        text: The text that will be/was embedded.

    Returns:
        64-character lowercase hex string.
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()

