"""Recompute queue worker.

One run_once() call claims a batch of queue items, re-scores every pair
affected by each item and records the outcome on the item. Items are
processed sequentially under a wall-clock budget; items left when the budget
runs out are released back to pending without an attempt penalty.

Queue item lifecycle:

    pending --claim--> processing --success--> done
                           |
                           +--failure, attempts < max--> pending (backoff)
                           +--failure, attempts = max--> error
                           +--budget exhausted--------> pending (no penalty)
                           +--run aborted-------------> pending (no penalty)
                           +--lease expired-----------> reclaimed, attempts + 1
"""

import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from haulmatch.models.recompute_queue import RecomputeQueueItem
from haulmatch.models.records import JOB_STATUS_ACTIVE
from haulmatch.providers.embedding.base import EmbeddingProvider
from haulmatch.services.budget import WallClockBudget
from haulmatch.services.embedding_cache import EmbeddingCache
from haulmatch.services.feature_extraction import (
    extract_candidate_from_application,
    extract_candidate_from_lead,
    extract_job_features,
)
from haulmatch.services.matching_store import MatchingStore
from haulmatch.services.pair_scoring import PairScorer
from haulmatch.services.scoring_units import (
    load_company_candidates,
    load_driver,
    rescore_company_job,
    rescore_driver,
)

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 20
DEFAULT_BUDGET_SECONDS = 50.0
DEFAULT_BACKOFF_UNIT_SECONDS = 60
DEFAULT_LEASE_SECONDS = 300


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class RecomputeRunResult:
    """Result of a single queue worker invocation.

    Attributes:
        processed: Items claimed.
        succeeded: Items marked done.
        failed: Items that raised (rescheduled or parked in error).
        skipped: Items released because the budget ran out.
        started_at: When the run started.
        finished_at: When the run finished.
    """

    processed: int
    succeeded: int
    failed: int
    skipped: int
    started_at: datetime
    finished_at: datetime

    def to_summary(self) -> dict[str, int]:
        return {
            "processed": self.processed,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
        }


@dataclass(frozen=True)
class _ClaimedItem:
    """Plain snapshot of a claimed row; ORM state does not survive rollback."""

    id: uuid.UUID
    entity_type: str
    entity_id: uuid.UUID
    company_id: uuid.UUID | None
    attempts: int
    max_attempts: int
    claim_token: uuid.UUID

    @classmethod
    def from_row(cls, row: RecomputeQueueItem) -> "_ClaimedItem":
        return cls(
            id=row.id,
            entity_type=row.entity_type,
            entity_id=row.entity_id,
            company_id=row.company_id,
            attempts=row.attempts,
            max_attempts=row.max_attempts,
            claim_token=row.claim_token,
        )


_Handler = Callable[[_ClaimedItem, datetime], Awaitable[None]]


def _error_text(error: Exception) -> str:
    message = str(error)
    return f"{type(error).__name__}: {message}" if message else type(error).__name__


class RecomputeWorker:
    """Drains the recompute queue one batch per invocation.

    Args:
        store: Storage for records, embeddings, scores and the queue.
        provider: Embedding provider, or None for rules-only scoring.
        batch_size: Maximum items claimed per invocation.
        budget_seconds: Wall-clock allowance per invocation.
        backoff_unit_seconds: Retry delay per failed attempt.
        lease_seconds: Age after which a processing item may be reclaimed.
        clock: Returns the current UTC time. Injectable for tests.
        monotonic: Monotonic clock for the budget. Injectable for tests.
    """

    def __init__(
        self,
        store: MatchingStore,
        provider: EmbeddingProvider | None,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        budget_seconds: float = DEFAULT_BUDGET_SECONDS,
        backoff_unit_seconds: int = DEFAULT_BACKOFF_UNIT_SECONDS,
        lease_seconds: int = DEFAULT_LEASE_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._scorer = PairScorer(EmbeddingCache(store, provider))
        self._batch_size = batch_size
        self._budget_seconds = budget_seconds
        self._backoff_unit = timedelta(seconds=backoff_unit_seconds)
        self._lease_seconds = lease_seconds
        self._clock = clock
        self._monotonic = monotonic
        self._handlers: dict[str, _Handler] = {
            "driver_profile": self._process_driver_profile,
            "job": self._process_job,
            "application": self._process_application,
            "lead": self._process_lead,
        }

    async def run_once(self) -> RecomputeRunResult:
        """Claim and process one batch.

        If the run is aborted (a storage error while recording an outcome,
        or task cancellation at shutdown), every item whose outcome was not
        recorded is released back to pending before the error propagates.

        Returns:
            RecomputeRunResult with per-outcome counts.
        """
        budget = WallClockBudget(self._budget_seconds, clock=self._monotonic)
        started_at = self._clock()

        rows = await self._store.claim_queue_batch(
            self._batch_size, self._lease_seconds, started_at
        )
        items = [_ClaimedItem.from_row(row) for row in rows]
        # Make the claim visible to other workers before doing any work
        await self._store.commit()

        succeeded = failed = skipped = 0
        unresolved = list(items)
        try:
            while unresolved:
                if budget.exhausted():
                    skipped = await self._release_remaining(unresolved)
                    unresolved = []
                    break
                if await self._process_item(unresolved[0]):
                    succeeded += 1
                else:
                    failed += 1
                unresolved.pop(0)
        finally:
            if unresolved:
                await self._abandon(unresolved)

        finished_at = self._clock()
        logger.info(
            "Recompute run complete: %d claimed, %d succeeded, %d failed, %d skipped",
            len(items),
            succeeded,
            failed,
            skipped,
        )
        return RecomputeRunResult(
            processed=len(items),
            succeeded=succeeded,
            failed=failed,
            skipped=skipped,
            started_at=started_at,
            finished_at=finished_at,
        )

    async def _process_item(self, item: _ClaimedItem) -> bool:
        """Run one item and record its outcome. Returns True on success."""
        handler = self._handlers.get(item.entity_type)
        try:
            if handler is None:
                msg = f"Unknown entity type: {item.entity_type}"
                raise ValueError(msg)
            await handler(item, self._clock())
            done = await self._store.mark_queue_item_done(
                item.id, item.claim_token, self._clock()
            )
            if not done:
                logger.warning("Queue item %s was reclaimed before completion", item.id)
            await self._store.commit()
            return True
        except Exception as e:  # noqa: BLE001
            await self._store.rollback()
            await self._record_failure(item, e)
            return False

    async def _record_failure(self, item: _ClaimedItem, error: Exception) -> None:
        attempts = item.attempts + 1
        now = self._clock()
        message = _error_text(error)
        if attempts < item.max_attempts:
            retry_at = now + attempts * self._backoff_unit
            await self._store.reschedule_queue_item(
                item.id,
                item.claim_token,
                attempts=attempts,
                scheduled_at=retry_at,
                error=message,
            )
            logger.warning(
                "Queue item %s (%s %s) failed, attempt %d/%d, retry at %s: %s",
                item.id,
                item.entity_type,
                item.entity_id,
                attempts,
                item.max_attempts,
                retry_at.isoformat(),
                message,
            )
        else:
            await self._store.mark_queue_item_error(
                item.id, item.claim_token, attempts=attempts, error=message, now=now
            )
            logger.error(
                "Queue item %s (%s %s) failed permanently after %d attempts: %s",
                item.id,
                item.entity_type,
                item.entity_id,
                attempts,
                message,
            )
        await self._store.commit()

    async def _release_remaining(self, items: list[_ClaimedItem]) -> int:
        for item in items:
            await self._store.release_queue_item(item.id, item.claim_token)
        await self._store.commit()
        logger.info("Budget exhausted; released %d queue items", len(items))
        return len(items)

    async def _abandon(self, items: list[_ClaimedItem]) -> None:
        """Release items after an aborted run without masking the abort."""
        try:
            await self._store.rollback()
            for item in items:
                await self._store.release_queue_item(item.id, item.claim_token)
            await self._store.commit()
        except Exception:
            logger.exception(
                "Could not release %d queue items; they wait for lease expiry",
                len(items),
            )
            return
        logger.warning("Run aborted; released %d queue items", len(items))

    # =========================================================================
    # Dispatch
    # =========================================================================

    async def _process_driver_profile(self, item: _ClaimedItem, now: datetime) -> None:
        """Driver vs every active job."""
        profile = await self._store.get_driver_profile(item.entity_id)
        if profile is None:
            return
        driver = await load_driver(self._store, profile)
        jobs = [extract_job_features(j) for j in await self._store.list_active_jobs()]
        await rescore_driver(self._store, self._scorer, driver, jobs, now)

    async def _process_job(self, item: _ClaimedItem, now: datetime) -> None:
        """Active job vs every driver, and vs the owning company's candidates."""
        job = await self._store.get_job(item.entity_id)
        if job is None or job.status != JOB_STATUS_ACTIVE:
            return
        company_id = item.company_id or job.company_id
        job_features = extract_job_features(job)

        for profile in await self._store.list_driver_profiles():
            driver = await load_driver(self._store, profile)
            await rescore_driver(self._store, self._scorer, driver, [job_features], now)

        if company_id is None:
            return
        candidates = await load_company_candidates(self._store, company_id)
        await rescore_company_job(
            self._store, self._scorer, company_id, job_features, candidates, now
        )

    async def _process_application(self, item: _ClaimedItem, now: datetime) -> None:
        """Application vs the owning company's active jobs."""
        application = await self._store.get_application(item.entity_id)
        if application is None:
            return
        company_id = item.company_id or application.company_id
        if company_id is None:
            return
        candidate = extract_candidate_from_application(application)
        for job in await self._store.list_active_jobs(company_id):
            await rescore_company_job(
                self._store,
                self._scorer,
                company_id,
                extract_job_features(job),
                [candidate],
                now,
            )

    async def _process_lead(self, item: _ClaimedItem, now: datetime) -> None:
        """Lead vs the owning company's active jobs."""
        lead = await self._store.get_lead(item.entity_id)
        if lead is None:
            return
        company_id = item.company_id or lead.company_id
        if company_id is None:
            return
        candidate = extract_candidate_from_lead(lead)
        for job in await self._store.list_active_jobs(company_id):
            await rescore_company_job(
                self._store,
                self._scorer,
                company_id,
                extract_job_features(job),
                [candidate],
                now,
            )
