"""Upserts for the two match score tables.

Rows are plain dicts keyed by column name (built by
haulmatch.services.pair_scoring). Every write is INSERT ... ON CONFLICT DO
UPDATE on the table's pair key, so concurrent writers resolve to
last-writer-wins. Large batches are split into several statements inside the
caller's transaction.
"""

from typing import Any

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from haulmatch.models.match_score import CompanyDriverMatchScore, DriverJobMatchScore

# Rows per INSERT; keeps bind parameters under the PostgreSQL limit of 32767
UPSERT_CHUNK_SIZE = 1000

_DRIVER_JOB_KEY = ("driver_id", "job_id")
_COMPANY_CANDIDATE_KEY = ("company_id", "job_id", "candidate_source", "candidate_id")


def _upsert_statement(
    model: type[DriverJobMatchScore] | type[CompanyDriverMatchScore],
    rows: list[dict[str, Any]],
    key: tuple[str, ...],
):
    stmt = insert(model).values(rows)
    # Every supplied column except the pair key is overwritten on conflict
    update_columns = [column for column in rows[0] if column not in key]
    return stmt.on_conflict_do_update(
        index_elements=list(key),
        set_={column: stmt.excluded[column] for column in update_columns},
    )


async def _upsert_in_chunks(
    db: AsyncSession,
    model: type[DriverJobMatchScore] | type[CompanyDriverMatchScore],
    rows: list[dict[str, Any]],
    key: tuple[str, ...],
) -> int:
    for start in range(0, len(rows), UPSERT_CHUNK_SIZE):
        chunk = rows[start : start + UPSERT_CHUNK_SIZE]
        await db.execute(_upsert_statement(model, chunk, key))
    return len(rows)


class MatchScoreRepository:
    """Stateless repository for match score upserts."""

    @staticmethod
    async def upsert_driver_job_scores(
        db: AsyncSession, rows: list[dict[str, Any]]
    ) -> int:
        """Insert or replace driver-job score rows.

        Args:
            db: Async database session.
            rows: Column dicts; each must include driver_id and job_id.

        Returns:
            Number of rows written.
        """
        return await _upsert_in_chunks(db, DriverJobMatchScore, rows, _DRIVER_JOB_KEY)

    @staticmethod
    async def upsert_company_candidate_scores(
        db: AsyncSession, rows: list[dict[str, Any]]
    ) -> int:
        """Insert or replace company-candidate score rows.

        Args:
            db: Async database session.
            rows: Column dicts; each must include the four pair-key columns.

        Returns:
            Number of rows written.
        """
        return await _upsert_in_chunks(
            db, CompanyDriverMatchScore, rows, _COMPANY_CANDIDATE_KEY
        )
