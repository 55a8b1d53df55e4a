"""Tests for MatchScoreRepository and EmbeddingRepository upserts.

Chunking is checked against a mocked session; the upserts themselves run
against PostgreSQL and are skipped when it is not available.
"""

import uuid
from datetime import UTC, datetime
from unittest.mock import AsyncMock

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql
from sqlalchemy.ext.asyncio import AsyncSession

from haulmatch.models.match_score import CompanyDriverMatchScore, DriverJobMatchScore
from haulmatch.repositories.embedding_repository import EmbeddingRepository
from haulmatch.repositories.match_score_repository import (
    UPSERT_CHUNK_SIZE,
    MatchScoreRepository,
)

_NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


def _score_columns(overall: int) -> dict:
    return {
        "overall_score": overall,
        "rules_score": overall,
        "semantic_score": None,
        "score_breakdown": {"driverType": {"score": 20, "maxScore": 20, "detail": ""}},
        "top_reasons": [{"text": "Driver type matches", "positive": True}],
        "cautions": [],
        "degraded_mode": True,
        "provider": None,
        "model": None,
        "computed_at": _NOW,
        "version": 1,
    }


class TestDriverJobUpsert:
    async def test_empty_rows_write_nothing(self, db_session: AsyncSession):
        assert await MatchScoreRepository.upsert_driver_job_scores(db_session, []) == 0

    async def test_second_write_replaces_first(self, db_session: AsyncSession):
        driver_id, job_id = uuid.uuid4(), uuid.uuid4()
        key = {"driver_id": driver_id, "job_id": job_id, "missing_fields": []}

        await MatchScoreRepository.upsert_driver_job_scores(
            db_session, [{**key, **_score_columns(50)}]
        )
        written = await MatchScoreRepository.upsert_driver_job_scores(
            db_session, [{**key, **_score_columns(72), "missing_fields": ["zip code"]}]
        )

        assert written == 1
        rows = (
            await db_session.execute(
                select(DriverJobMatchScore).where(
                    DriverJobMatchScore.driver_id == driver_id
                )
            )
        ).scalars().all()
        assert len(rows) == 1
        assert rows[0].overall_score == 72
        assert rows[0].missing_fields == ["zip code"]

    async def test_confidence_is_stored(self, db_session: AsyncSession):
        driver_id, job_id = uuid.uuid4(), uuid.uuid4()
        row = {
            "driver_id": driver_id,
            "job_id": job_id,
            "missing_fields": [],
            "confidence": "medium",
            **_score_columns(61),
        }

        await MatchScoreRepository.upsert_driver_job_scores(db_session, [row])

        stored = await db_session.scalar(
            select(DriverJobMatchScore.confidence).where(
                DriverJobMatchScore.driver_id == driver_id
            )
        )
        assert stored == "medium"


class TestChunkedUpserts:
    """Large batches are split so no statement exceeds the bind limit."""

    def _rows(self, count: int) -> list[dict]:
        job_id = uuid.uuid4()
        return [
            {
                "driver_id": uuid.uuid4(),
                "job_id": job_id,
                "missing_fields": [],
                "confidence": "low",
                **_score_columns(50),
            }
            for _ in range(count)
        ]

    async def test_splits_large_batches(self):
        db = AsyncMock()
        rows = self._rows(2 * UPSERT_CHUNK_SIZE + 400)

        written = await MatchScoreRepository.upsert_driver_job_scores(db, rows)

        assert written == len(rows)
        assert db.execute.await_count == 3
        for call in db.execute.await_args_list:
            stmt = call.args[0]
            params = stmt.compile(dialect=postgresql.dialect()).params
            assert len(params) < 32767

    async def test_small_batch_is_one_statement(self):
        db = AsyncMock()

        await MatchScoreRepository.upsert_driver_job_scores(db, self._rows(3))

        assert db.execute.await_count == 1

    async def test_company_rows_are_chunked_too(self):
        db = AsyncMock()
        rows = [
            {
                "company_id": uuid.uuid4(),
                "job_id": uuid.uuid4(),
                "candidate_source": "lead",
                "candidate_id": uuid.uuid4(),
                "candidate_driver_id": None,
                **_score_columns(40),
            }
            for _ in range(UPSERT_CHUNK_SIZE + 1)
        ]

        written = await MatchScoreRepository.upsert_company_candidate_scores(db, rows)

        assert written == UPSERT_CHUNK_SIZE + 1
        assert db.execute.await_count == 2


class TestCompanyCandidateUpsert:
    async def test_one_row_per_pair_key(self, db_session: AsyncSession):
        company_id, job_id, lead_id = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
        row = {
            "company_id": company_id,
            "job_id": job_id,
            "candidate_source": "lead",
            "candidate_id": lead_id,
            "candidate_driver_id": None,
            **_score_columns(40),
        }

        await MatchScoreRepository.upsert_company_candidate_scores(db_session, [row])
        await MatchScoreRepository.upsert_company_candidate_scores(
            db_session, [{**row, "overall_score": 45, "rules_score": 45}]
        )

        count = await db_session.scalar(
            select(func.count()).select_from(CompanyDriverMatchScore)
        )
        stored = await db_session.scalar(
            select(CompanyDriverMatchScore.overall_score).where(
                CompanyDriverMatchScore.candidate_id == lead_id
            )
        )
        assert count == 1
        assert stored == 45


class TestEmbeddingUpsert:
    async def test_insert_then_replace(self, db_session: AsyncSession):
        entity_id = uuid.uuid4()

        await EmbeddingRepository.upsert(
            db_session,
            entity_type="job",
            entity_id=entity_id,
            content_hash="a" * 64,
            embedding=[0.1, 0.2, 0.3],
            provider="mock",
            model="mock-embedding-model",
        )
        await EmbeddingRepository.upsert(
            db_session,
            entity_type="job",
            entity_id=entity_id,
            content_hash="b" * 64,
            embedding=[0.4, 0.5],
            provider="mock",
            model="mock-embedding-model",
        )

        row = await EmbeddingRepository.get(db_session, "job", entity_id)
        assert row is not None
        await db_session.refresh(row)
        assert row.content_hash == "b" * 64
        assert row.dimensions == 2
        assert [round(float(x), 4) for x in row.embedding] == [0.4, 0.5]

    async def test_missing_row(self, db_session: AsyncSession):
        assert await EmbeddingRepository.get(db_session, "lead", uuid.uuid4()) is None
