"""Matching trigger endpoints.

Called by the scheduler (or an operator) to run one recompute batch or the
full backfill inside the API process. Both return the run summary.
"""

from typing import Annotated

from fastapi import APIRouter, Depends

from haulmatch.api.deps import get_matching_store, require_cron_secret
from haulmatch.core.responses import BackfillSummary, RecomputeSummary
from haulmatch.services.matching_runs import run_backfill, run_recompute
from haulmatch.services.matching_store import MatchingStore

router = APIRouter(dependencies=[Depends(require_cron_secret)])


@router.post("/recompute", response_model=RecomputeSummary)
async def trigger_recompute(
    store: Annotated[MatchingStore, Depends(get_matching_store)],
) -> dict[str, int]:
    """Process one batch of the recompute queue.

    Returns:
        {"processed", "succeeded", "failed", "skipped"} counts.
    """
    result = await run_recompute(store)
    return result.to_summary()


@router.post("/backfill", response_model=BackfillSummary)
async def trigger_backfill(
    store: Annotated[MatchingStore, Depends(get_matching_store)],
) -> dict[str, int | bool]:
    """Run the full re-scoring pass.

    Returns:
        {"driverJobPairs", "companyCandidatePairs", "failedUnits",
        "elapsedMs", "complete"}.
    """
    result = await run_backfill(store)
    return result.to_summary()
