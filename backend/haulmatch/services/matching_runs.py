"""Entry points that wire settings and the embedding provider into a run.

Used by the trigger endpoints and the periodic workers. The scoring code
below this layer never reads settings.
"""

from haulmatch.core.config import settings
from haulmatch.providers.factory import get_embedding_provider
from haulmatch.services.matching_store import MatchingStore
from haulmatch.services.nightly_backfill import BackfillResult, NightlyBackfill
from haulmatch.services.recompute_worker import RecomputeRunResult, RecomputeWorker


async def run_recompute(store: MatchingStore) -> RecomputeRunResult:
    """Process one batch of the recompute queue."""
    worker = RecomputeWorker(
        store,
        get_embedding_provider(),
        batch_size=settings.recompute_batch_size,
        budget_seconds=settings.recompute_budget_seconds,
        backoff_unit_seconds=settings.recompute_backoff_unit_seconds,
        lease_seconds=settings.recompute_lease_seconds,
    )
    return await worker.run_once()


async def run_backfill(store: MatchingStore) -> BackfillResult:
    """Run the full nightly re-scoring pass."""
    backfill = NightlyBackfill(
        store,
        get_embedding_provider(),
        window_days=settings.backfill_window_days,
        budget_seconds=settings.backfill_budget_seconds,
    )
    return await backfill.run()
