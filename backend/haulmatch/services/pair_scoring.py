"""Score pairs and build the score-table rows.

PairScorer runs the rule scorer, fetches both embeddings through the
EmbeddingCache, composes the semantic layer and returns plain row dicts
ready for MatchScoreRepository upserts. It holds no database state.
"""

import uuid
from datetime import datetime
from typing import Any

from haulmatch.services.company_candidate_rules import (
    compute_company_candidate_rules_score,
)
from haulmatch.services.driver_job_rules import compute_driver_job_rules_score
from haulmatch.services.embedding_cache import EmbeddingCache
from haulmatch.services.embedding_storage import EmbeddingEntityType
from haulmatch.services.feature_extraction import derive_missing_fields
from haulmatch.services.match_types import (
    CandidateFeatures,
    DriverFeatures,
    JobFeatures,
    MatchResult,
)
from haulmatch.services.score_composer import compose_match, derive_confidence

# Bumped whenever scoring rules change in a way that invalidates stored rows
SCORING_VERSION = 1


def _score_columns(
    result: MatchResult,
    *,
    provider: str | None,
    model: str | None,
    computed_at: datetime,
) -> dict[str, Any]:
    return {
        "overall_score": result.overall_score,
        "rules_score": result.rules_score,
        "semantic_score": result.semantic_score,
        "score_breakdown": result.breakdown_to_dict(),
        "top_reasons": [r.to_dict() for r in result.top_reasons],
        "cautions": [c.to_dict() for c in result.cautions],
        "degraded_mode": result.degraded_mode,
        "provider": provider,
        "model": model,
        "computed_at": computed_at,
        "version": SCORING_VERSION,
    }


class PairScorer:
    """Scores driver-job and candidate-job pairs.

    Args:
        cache: Embedding cache; its provider may be None (rules-only mode).
    """

    def __init__(self, cache: EmbeddingCache) -> None:
        self._cache = cache
        provider = cache.provider
        self._provider_name = provider.provider_name if provider else None
        self._model_name = provider.model_name if provider else None

    async def driver_embedding(self, driver: DriverFeatures) -> list[float] | None:
        return await self._cache.get_or_compute(
            EmbeddingEntityType.DRIVER.value, driver.driver_id, driver.text_block
        )

    async def job_embedding(self, job: JobFeatures) -> list[float] | None:
        return await self._cache.get_or_compute(
            EmbeddingEntityType.JOB.value, job.job_id, job.text_block
        )

    async def candidate_embedding(
        self, candidate: CandidateFeatures
    ) -> list[float] | None:
        return await self._cache.get_or_compute(
            candidate.source, candidate.candidate_id, candidate.text_block
        )

    async def score_driver_job(
        self,
        driver: DriverFeatures,
        job: JobFeatures,
        now: datetime,
    ) -> dict[str, Any]:
        """Score one driver against one job.

        Returns:
            Row dict for driver_job_match_scores.
        """
        result = compute_driver_job_rules_score(driver, job)
        result = compose_match(
            result, await self.driver_embedding(driver), await self.job_embedding(job)
        )
        missing_fields = derive_missing_fields(driver)
        return {
            "driver_id": driver.driver_id,
            "job_id": job.job_id,
            "missing_fields": missing_fields,
            "confidence": derive_confidence(missing_fields, result.semantic_score),
            **_score_columns(
                result,
                provider=self._provider_name,
                model=self._model_name,
                computed_at=now,
            ),
        }

    async def score_candidate_job(
        self,
        candidate: CandidateFeatures,
        job: JobFeatures,
        company_id: uuid.UUID,
        now: datetime,
    ) -> dict[str, Any]:
        """Score one candidate against one of the company's jobs.

        Returns:
            Row dict for company_driver_match_scores.
        """
        result = compute_company_candidate_rules_score(candidate, job, now)
        result = compose_match(
            result,
            await self.candidate_embedding(candidate),
            await self.job_embedding(job),
        )
        return {
            "company_id": company_id,
            "job_id": job.job_id,
            "candidate_source": candidate.source,
            "candidate_id": candidate.candidate_id,
            "candidate_driver_id": candidate.candidate_driver_id,
            **_score_columns(
                result,
                provider=self._provider_name,
                model=self._model_name,
                computed_at=now,
            ),
        }
