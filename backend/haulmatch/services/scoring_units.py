"""Units of re-scoring work shared by the queue worker and the backfill.

Units work on frozen feature snapshots rather than ORM rows: a rollback
expires every instance in the session, and the snapshots stay usable after
one. Units never commit; the caller owns the transaction.
"""

import uuid
from datetime import datetime

from haulmatch.models.records import DriverProfile
from haulmatch.services.feature_extraction import (
    extract_candidate_from_application,
    extract_candidate_from_lead,
    extract_driver_features,
)
from haulmatch.services.match_types import (
    CandidateFeatures,
    DriverFeatures,
    JobFeatures,
)
from haulmatch.services.matching_store import MatchingStore
from haulmatch.services.pair_scoring import PairScorer


async def load_driver(store: MatchingStore, profile: DriverProfile) -> DriverFeatures:
    """Merge a profile with the driver's most recent application."""
    application = await store.get_latest_application_for_driver(profile.id)
    return extract_driver_features(profile, application)


async def load_company_candidates(
    store: MatchingStore, company_id: uuid.UUID
) -> list[CandidateFeatures]:
    """All of a company's applications followed by all of its leads."""
    applications = await store.list_company_applications(company_id)
    leads = await store.list_company_leads(company_id)
    return [extract_candidate_from_application(a) for a in applications] + [
        extract_candidate_from_lead(lead) for lead in leads
    ]


async def rescore_driver(
    store: MatchingStore,
    scorer: PairScorer,
    driver: DriverFeatures,
    jobs: list[JobFeatures],
    now: datetime,
) -> int:
    """Score one driver against each job and upsert the rows.

    Returns:
        Number of driver-job rows written.
    """
    rows = [await scorer.score_driver_job(driver, job, now) for job in jobs]
    return await store.upsert_driver_job_scores(rows)


async def rescore_company_job(
    store: MatchingStore,
    scorer: PairScorer,
    company_id: uuid.UUID,
    job: JobFeatures,
    candidates: list[CandidateFeatures],
    now: datetime,
) -> int:
    """Score a company's candidates against one of its jobs and upsert.

    Returns:
        Number of company-candidate rows written.
    """
    rows = [
        await scorer.score_candidate_job(candidate, job, company_id, now)
        for candidate in candidates
    ]
    return await store.upsert_company_candidate_scores(rows)
