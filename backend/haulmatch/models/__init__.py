"""SQLAlchemy ORM models for HaulMatch.

All models are exported from this module for convenient imports:
    from haulmatch.models import DriverProfile, Job, RecomputeQueueItem, ...

Models are organized by ownership:
- records.py: DriverProfile, Job, Application, Lead (read-only inbound records)
- match_score.py: DriverJobMatchScore, CompanyDriverMatchScore
- embedding.py: MatchingTextEmbedding
- recompute_queue.py: RecomputeQueueItem
"""

from haulmatch.models.base import Base, TimestampMixin
from haulmatch.models.embedding import MatchingTextEmbedding
from haulmatch.models.match_score import CompanyDriverMatchScore, DriverJobMatchScore
from haulmatch.models.records import Application, DriverProfile, Job, Lead
from haulmatch.models.recompute_queue import RecomputeQueueItem

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    # Inbound records
    "DriverProfile",
    "Job",
    "Application",
    "Lead",
    # Matching outputs
    "DriverJobMatchScore",
    "CompanyDriverMatchScore",
    "MatchingTextEmbedding",
    # Queue
    "RecomputeQueueItem",
]
