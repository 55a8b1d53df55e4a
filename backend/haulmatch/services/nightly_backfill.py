"""Nightly full refresh of both match score tables.

Phase A re-scores every recently updated driver against all active jobs.
Phase B re-scores each company's applications and leads against each of
that company's active jobs. Each unit (one driver, or one company-job pair)
commits on its own, so a failure or an exhausted budget keeps the work
already done.
"""

import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from haulmatch.providers.embedding.base import EmbeddingProvider
from haulmatch.services.budget import WallClockBudget
from haulmatch.services.embedding_cache import EmbeddingCache
from haulmatch.services.feature_extraction import extract_job_features
from haulmatch.services.match_types import CandidateFeatures, JobFeatures
from haulmatch.services.matching_store import MatchingStore
from haulmatch.services.pair_scoring import PairScorer
from haulmatch.services.scoring_units import (
    load_company_candidates,
    load_driver,
    rescore_company_job,
    rescore_driver,
)

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 90
DEFAULT_BUDGET_SECONDS = 50.0


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass
class BackfillResult:
    """Result of one backfill run.

    Attributes:
        driver_job_pairs: Driver-job rows written.
        company_candidate_pairs: Company-candidate rows written.
        failed_units: Drivers or company-job pairs that raised.
        elapsed_ms: Wall-clock duration.
        complete: False if the budget ran out before all units were done.
    """

    driver_job_pairs: int = 0
    company_candidate_pairs: int = 0
    failed_units: int = 0
    elapsed_ms: int = 0
    complete: bool = True

    def to_summary(self) -> dict[str, int | bool]:
        return {
            "driverJobPairs": self.driver_job_pairs,
            "companyCandidatePairs": self.company_candidate_pairs,
            "failedUnits": self.failed_units,
            "elapsedMs": self.elapsed_ms,
            "complete": self.complete,
        }


def _group_by_company(
    jobs: list[JobFeatures],
) -> dict[uuid.UUID, list[JobFeatures]]:
    grouped: dict[uuid.UUID, list[JobFeatures]] = {}
    for job in jobs:
        if job.company_id is not None:
            grouped.setdefault(job.company_id, []).append(job)
    return grouped


class NightlyBackfill:
    """Full re-scoring pass under a wall-clock budget.

    Args:
        store: Storage for records, embeddings and scores.
        provider: Embedding provider, or None for rules-only scoring.
        window_days: Only drivers updated within this many days are scored.
        budget_seconds: Wall-clock allowance for the run.
        clock: Returns the current UTC time. Injectable for tests.
        monotonic: Monotonic clock for the budget. Injectable for tests.
    """

    def __init__(
        self,
        store: MatchingStore,
        provider: EmbeddingProvider | None,
        *,
        window_days: int = DEFAULT_WINDOW_DAYS,
        budget_seconds: float = DEFAULT_BUDGET_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._scorer = PairScorer(EmbeddingCache(store, provider))
        self._window = timedelta(days=window_days)
        self._budget_seconds = budget_seconds
        self._clock = clock
        self._monotonic = monotonic

    async def run(self) -> BackfillResult:
        """Run both phases until done or out of budget."""
        budget = WallClockBudget(self._budget_seconds, clock=self._monotonic)
        result = BackfillResult()
        now = self._clock()

        jobs = [extract_job_features(j) for j in await self._store.list_active_jobs()]
        if await self._driver_phase(jobs, now, budget, result):
            await self._company_phase(jobs, now, budget, result)

        result.elapsed_ms = budget.elapsed_ms
        logger.info(
            "Backfill %s: %d driver-job pairs, %d company-candidate pairs, "
            "%d failed units in %dms",
            "complete" if result.complete else "stopped on budget",
            result.driver_job_pairs,
            result.company_candidate_pairs,
            result.failed_units,
            result.elapsed_ms,
        )
        return result

    async def _driver_phase(
        self,
        jobs: list[JobFeatures],
        now: datetime,
        budget: WallClockBudget,
        result: BackfillResult,
    ) -> bool:
        """Phase A. Returns False if the budget ran out."""
        profiles = await self._store.list_driver_profiles(
            updated_since=now - self._window
        )
        if not jobs:
            return True

        # Snapshot every driver before scoring; a rollback expires ORM rows,
        # so a load failure gives up on the drivers not yet loaded.
        drivers = []
        for index, profile in enumerate(profiles):
            if budget.exhausted():
                result.complete = False
                return False
            try:
                drivers.append(await load_driver(self._store, profile))
            except Exception:  # noqa: BLE001
                await self._store.rollback()
                result.failed_units += len(profiles) - index
                logger.exception(
                    "Backfill failed to load drivers; %d not scored",
                    len(profiles) - index,
                )
                break

        for driver in drivers:
            if budget.exhausted():
                result.complete = False
                return False
            try:
                written = await rescore_driver(
                    self._store, self._scorer, driver, jobs, now
                )
                await self._store.commit()
            except Exception:  # noqa: BLE001
                await self._store.rollback()
                result.failed_units += 1
                logger.exception("Backfill failed for driver %s", driver.driver_id)
                continue
            result.driver_job_pairs += written
        return True

    async def _company_phase(
        self,
        jobs: list[JobFeatures],
        now: datetime,
        budget: WallClockBudget,
        result: BackfillResult,
    ) -> None:
        """Phase B. Stops early (complete=False) if the budget runs out."""
        for company_id, company_jobs in _group_by_company(jobs).items():
            if budget.exhausted():
                result.complete = False
                return
            try:
                candidates = await load_company_candidates(self._store, company_id)
            except Exception:  # noqa: BLE001
                await self._store.rollback()
                result.failed_units += len(company_jobs)
                logger.exception("Backfill failed to load candidates for %s", company_id)
                continue
            if not candidates:
                continue

            for job in company_jobs:
                if budget.exhausted():
                    result.complete = False
                    return
                await self._company_job_unit(company_id, job, candidates, now, result)

    async def _company_job_unit(
        self,
        company_id: uuid.UUID,
        job: JobFeatures,
        candidates: list[CandidateFeatures],
        now: datetime,
        result: BackfillResult,
    ) -> None:
        try:
            written = await rescore_company_job(
                self._store, self._scorer, company_id, job, candidates, now
            )
            await self._store.commit()
        except Exception:  # noqa: BLE001
            await self._store.rollback()
            result.failed_units += 1
            logger.exception("Backfill failed for company %s job %s", company_id, job.job_id)
            return
        result.company_candidate_pairs += written
