"""Recompute queue persistence: atomic claim and conditional transitions.

Each claim stamps the row with a fresh claim_token. Every transition out of
`processing` is guarded by both `status = 'processing'` and that token, so a
worker whose lease expired (and whose item was reclaimed elsewhere) cannot
overwrite the new owner's outcome. The functions return the number of rows
changed so callers can detect a lost item.

An expired lease is charged as a failed attempt. Reclaiming bumps attempts;
a row whose next attempt would reach max_attempts is parked in `error`
instead of being claimed again.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, cast

from sqlalchemy import and_, case, func, or_, select, update
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession

from haulmatch.models.recompute_queue import (
    STATUS_DONE,
    STATUS_ERROR,
    STATUS_PENDING,
    STATUS_PROCESSING,
    RecomputeQueueItem,
)

logger = logging.getLogger(__name__)

# Queue error text is truncated before storage
MAX_ERROR_LENGTH = 1000


def lease_expired_error(lease_seconds: int) -> str:
    return f"LeaseExpired: worker did not finish within {lease_seconds}s"


def _expired_lease(now: datetime, lease_seconds: int):
    item = RecomputeQueueItem
    return and_(
        item.status == STATUS_PROCESSING,
        item.started_at < now - timedelta(seconds=lease_seconds),
    )


def build_claim_statement(batch_size: int, lease_seconds: int, now: datetime):
    """Build the single-statement claim.

    UPDATE ... SET status='processing', claim_token=gen_random_uuid()
    WHERE id IN (SELECT id ... FOR UPDATE SKIP LOCKED) RETURNING *

    Claimable rows are pending rows that are due, plus processing rows whose
    lease has expired and that still have an attempt left. Concurrent
    claimers skip rows another transaction has locked, so no row is claimed
    twice.
    """
    item = RecomputeQueueItem
    reclaimed = item.status == STATUS_PROCESSING
    claimable = (
        select(item.id)
        .where(
            or_(
                and_(item.status == STATUS_PENDING, item.scheduled_at <= now),
                and_(
                    _expired_lease(now, lease_seconds),
                    item.attempts + 1 < item.max_attempts,
                ),
            )
        )
        .order_by(item.scheduled_at)
        .limit(batch_size)
        .with_for_update(skip_locked=True)
    )
    return (
        update(item)
        .where(item.id.in_(claimable))
        .values(
            status=STATUS_PROCESSING,
            started_at=now,
            claim_token=func.gen_random_uuid(),
            # SET expressions see the pre-update row
            attempts=case((reclaimed, item.attempts + 1), else_=item.attempts),
            last_error=case(
                (reclaimed, lease_expired_error(lease_seconds)),
                else_=item.last_error,
            ),
        )
        .returning(item)
        .execution_options(synchronize_session=False, populate_existing=True)
    )


def build_park_expired_statement(lease_seconds: int, now: datetime):
    """Move expired processing rows with no attempt left to `error`."""
    item = RecomputeQueueItem
    exhausted = (
        select(item.id)
        .where(
            _expired_lease(now, lease_seconds),
            item.attempts + 1 >= item.max_attempts,
        )
        .with_for_update(skip_locked=True)
    )
    return (
        update(item)
        .where(item.id.in_(exhausted))
        .values(
            status=STATUS_ERROR,
            attempts=item.attempts + 1,
            completed_at=now,
            claim_token=None,
            last_error=lease_expired_error(lease_seconds),
        )
        .execution_options(synchronize_session=False)
    )


class RecomputeQueueRepository:
    """Stateless repository for the recompute queue."""

    @staticmethod
    async def enqueue(
        db: AsyncSession,
        *,
        entity_type: str,
        entity_id: uuid.UUID,
        company_id: uuid.UUID | None = None,
        scheduled_at: datetime | None = None,
    ) -> RecomputeQueueItem:
        """Add an item to the queue.

        Normally the marketplace's database triggers do this; the method
        exists for operators and tests.
        """
        item = RecomputeQueueItem(
            entity_type=entity_type,
            entity_id=entity_id,
            company_id=company_id,
        )
        if scheduled_at is not None:
            item.scheduled_at = scheduled_at
        db.add(item)
        await db.flush()
        await db.refresh(item)
        return item

    @staticmethod
    async def claim_batch(
        db: AsyncSession,
        *,
        batch_size: int,
        lease_seconds: int,
        now: datetime,
    ) -> list[RecomputeQueueItem]:
        """Atomically move up to batch_size claimable items to processing.

        Expired leases with no attempt left are parked in `error` first.

        Returns:
            Claimed items ordered by scheduled_at, each with its new
            claim_token. Reclaimed items carry the bumped attempts count.
        """
        parked = cast(
            CursorResult[Any],
            await db.execute(build_park_expired_statement(lease_seconds, now)),
        )
        if parked.rowcount:
            logger.warning(
                "Parked %d queue items in error after their final lease expired",
                parked.rowcount,
            )
        result = await db.execute(build_claim_statement(batch_size, lease_seconds, now))
        items = list(result.scalars().all())
        items.sort(key=lambda i: i.scheduled_at)
        return items

    @staticmethod
    async def _transition(
        db: AsyncSession,
        item_id: uuid.UUID,
        claim_token: uuid.UUID,
        values: dict[str, Any],
    ) -> int:
        stmt = (
            update(RecomputeQueueItem)
            .where(
                RecomputeQueueItem.id == item_id,
                RecomputeQueueItem.status == STATUS_PROCESSING,
                RecomputeQueueItem.claim_token == claim_token,
            )
            .values(claim_token=None, **values)
            .execution_options(synchronize_session=False)
        )
        result = cast(CursorResult[Any], await db.execute(stmt))
        row_count: int = result.rowcount
        return row_count

    @staticmethod
    async def mark_done(
        db: AsyncSession, item_id: uuid.UUID, claim_token: uuid.UUID, now: datetime
    ) -> int:
        return await RecomputeQueueRepository._transition(
            db, item_id, claim_token, {"status": STATUS_DONE, "completed_at": now}
        )

    @staticmethod
    async def reschedule(
        db: AsyncSession,
        item_id: uuid.UUID,
        claim_token: uuid.UUID,
        *,
        attempts: int,
        scheduled_at: datetime,
        error: str,
    ) -> int:
        """Return a failed item to pending for a later retry."""
        return await RecomputeQueueRepository._transition(
            db,
            item_id,
            claim_token,
            {
                "status": STATUS_PENDING,
                "attempts": attempts,
                "scheduled_at": scheduled_at,
                "started_at": None,
                "last_error": error[:MAX_ERROR_LENGTH],
            },
        )

    @staticmethod
    async def mark_error(
        db: AsyncSession,
        item_id: uuid.UUID,
        claim_token: uuid.UUID,
        *,
        attempts: int,
        error: str,
        now: datetime,
    ) -> int:
        """Park an item in the terminal error state."""
        return await RecomputeQueueRepository._transition(
            db,
            item_id,
            claim_token,
            {
                "status": STATUS_ERROR,
                "attempts": attempts,
                "completed_at": now,
                "last_error": error[:MAX_ERROR_LENGTH],
            },
        )

    @staticmethod
    async def release(
        db: AsyncSession, item_id: uuid.UUID, claim_token: uuid.UUID
    ) -> int:
        """Hand an unstarted item back to pending without an attempt penalty."""
        return await RecomputeQueueRepository._transition(
            db, item_id, claim_token, {"status": STATUS_PENDING, "started_at": None}
        )
