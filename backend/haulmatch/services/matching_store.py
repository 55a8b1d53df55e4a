"""Storage seam for the matching pipeline.

The worker, the backfill and the embedding cache depend on the MatchingStore
protocol rather than on a session, so their logic can be exercised against an
in-memory store. SqlAlchemyMatchingStore is the production implementation; it
delegates to the stateless repositories with one AsyncSession.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from haulmatch.models.recompute_queue import RecomputeQueueItem
from haulmatch.models.records import Application, DriverProfile, Job, Lead
from haulmatch.repositories.embedding_repository import EmbeddingRepository
from haulmatch.repositories.match_score_repository import MatchScoreRepository
from haulmatch.repositories.recompute_queue_repository import (
    RecomputeQueueRepository,
)
from haulmatch.repositories.record_repository import RecordRepository


@dataclass(frozen=True)
class StoredEmbedding:
    """A persisted embedding, detached from the ORM row."""

    content_hash: str
    vector: list[float]
    provider: str
    model: str


class MatchingStore(Protocol):
    """Everything the matching pipeline reads and writes."""

    # Inbound records
    async def get_driver_profile(self, driver_id: uuid.UUID) -> DriverProfile | None: ...

    async def list_driver_profiles(
        self, updated_since: datetime | None = None
    ) -> list[DriverProfile]: ...

    async def get_latest_application_for_driver(
        self, driver_id: uuid.UUID
    ) -> Application | None: ...

    async def get_job(self, job_id: uuid.UUID) -> Job | None: ...

    async def list_active_jobs(
        self, company_id: uuid.UUID | None = None
    ) -> list[Job]: ...

    async def get_application(self, application_id: uuid.UUID) -> Application | None: ...

    async def list_company_applications(
        self, company_id: uuid.UUID
    ) -> list[Application]: ...

    async def get_lead(self, lead_id: uuid.UUID) -> Lead | None: ...

    async def list_company_leads(self, company_id: uuid.UUID) -> list[Lead]: ...

    # Embeddings
    async def get_embedding(
        self, entity_type: str, entity_id: uuid.UUID
    ) -> StoredEmbedding | None: ...

    async def upsert_embedding(
        self,
        entity_type: str,
        entity_id: uuid.UUID,
        *,
        content_hash: str,
        vector: list[float],
        provider: str,
        model: str,
    ) -> None: ...

    # Scores
    async def upsert_driver_job_scores(self, rows: list[dict[str, Any]]) -> int: ...

    async def upsert_company_candidate_scores(
        self, rows: list[dict[str, Any]]
    ) -> int: ...

    # Recompute queue
    async def claim_queue_batch(
        self, batch_size: int, lease_seconds: int, now: datetime
    ) -> list[RecomputeQueueItem]: ...

    async def mark_queue_item_done(
        self, item_id: uuid.UUID, claim_token: uuid.UUID, now: datetime
    ) -> int: ...

    async def reschedule_queue_item(
        self,
        item_id: uuid.UUID,
        claim_token: uuid.UUID,
        *,
        attempts: int,
        scheduled_at: datetime,
        error: str,
    ) -> int: ...

    async def mark_queue_item_error(
        self,
        item_id: uuid.UUID,
        claim_token: uuid.UUID,
        *,
        attempts: int,
        error: str,
        now: datetime,
    ) -> int: ...

    async def release_queue_item(
        self, item_id: uuid.UUID, claim_token: uuid.UUID
    ) -> int: ...

    # Transactions
    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


class SqlAlchemyMatchingStore:
    """MatchingStore backed by PostgreSQL through one AsyncSession."""

    def __init__(self, session: AsyncSession) -> None:
        self._db = session

    async def get_driver_profile(self, driver_id: uuid.UUID) -> DriverProfile | None:
        return await RecordRepository.get_driver_profile(self._db, driver_id)

    async def list_driver_profiles(
        self, updated_since: datetime | None = None
    ) -> list[DriverProfile]:
        return await RecordRepository.list_driver_profiles(
            self._db, updated_since=updated_since
        )

    async def get_latest_application_for_driver(
        self, driver_id: uuid.UUID
    ) -> Application | None:
        return await RecordRepository.get_latest_application_for_driver(
            self._db, driver_id
        )

    async def get_job(self, job_id: uuid.UUID) -> Job | None:
        return await RecordRepository.get_job(self._db, job_id)

    async def list_active_jobs(self, company_id: uuid.UUID | None = None) -> list[Job]:
        return await RecordRepository.list_active_jobs(self._db, company_id=company_id)

    async def get_application(self, application_id: uuid.UUID) -> Application | None:
        return await RecordRepository.get_application(self._db, application_id)

    async def list_company_applications(
        self, company_id: uuid.UUID
    ) -> list[Application]:
        return await RecordRepository.list_company_applications(self._db, company_id)

    async def get_lead(self, lead_id: uuid.UUID) -> Lead | None:
        return await RecordRepository.get_lead(self._db, lead_id)

    async def list_company_leads(self, company_id: uuid.UUID) -> list[Lead]:
        return await RecordRepository.list_company_leads(self._db, company_id)

    async def get_embedding(
        self, entity_type: str, entity_id: uuid.UUID
    ) -> StoredEmbedding | None:
        row = await EmbeddingRepository.get(self._db, entity_type, entity_id)
        if row is None:
            return None
        # pgvector hands back a numpy array
        return StoredEmbedding(
            content_hash=row.content_hash,
            vector=[float(x) for x in row.embedding],
            provider=row.provider,
            model=row.model,
        )

    async def upsert_embedding(
        self,
        entity_type: str,
        entity_id: uuid.UUID,
        *,
        content_hash: str,
        vector: list[float],
        provider: str,
        model: str,
    ) -> None:
        await EmbeddingRepository.upsert(
            self._db,
            entity_type=entity_type,
            entity_id=entity_id,
            content_hash=content_hash,
            embedding=vector,
            provider=provider,
            model=model,
        )

    async def upsert_driver_job_scores(self, rows: list[dict[str, Any]]) -> int:
        return await MatchScoreRepository.upsert_driver_job_scores(self._db, rows)

    async def upsert_company_candidate_scores(self, rows: list[dict[str, Any]]) -> int:
        return await MatchScoreRepository.upsert_company_candidate_scores(self._db, rows)

    async def claim_queue_batch(
        self, batch_size: int, lease_seconds: int, now: datetime
    ) -> list[RecomputeQueueItem]:
        return await RecomputeQueueRepository.claim_batch(
            self._db, batch_size=batch_size, lease_seconds=lease_seconds, now=now
        )

    async def mark_queue_item_done(
        self, item_id: uuid.UUID, claim_token: uuid.UUID, now: datetime
    ) -> int:
        return await RecomputeQueueRepository.mark_done(
            self._db, item_id, claim_token, now
        )

    async def reschedule_queue_item(
        self,
        item_id: uuid.UUID,
        claim_token: uuid.UUID,
        *,
        attempts: int,
        scheduled_at: datetime,
        error: str,
    ) -> int:
        return await RecomputeQueueRepository.reschedule(
            self._db,
            item_id,
            claim_token,
            attempts=attempts,
            scheduled_at=scheduled_at,
            error=error,
        )

    async def mark_queue_item_error(
        self,
        item_id: uuid.UUID,
        claim_token: uuid.UUID,
        *,
        attempts: int,
        error: str,
        now: datetime,
    ) -> int:
        return await RecomputeQueueRepository.mark_error(
            self._db, item_id, claim_token, attempts=attempts, error=error, now=now
        )

    async def release_queue_item(
        self, item_id: uuid.UUID, claim_token: uuid.UUID
    ) -> int:
        return await RecomputeQueueRepository.release(self._db, item_id, claim_token)

    async def commit(self) -> None:
        await self._db.commit()

    async def rollback(self) -> None:
        await self._db.rollback()
