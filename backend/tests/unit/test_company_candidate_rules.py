"""Tests for company → candidate rules scoring."""

import uuid
from datetime import datetime, timedelta

import pytest

from haulmatch.services.company_candidate_rules import (
    compute_company_candidate_rules_score,
    score_driver_type,
    score_license_class,
    score_recency,
    score_route_freight_team,
)
from haulmatch.services.feature_extraction import (
    extract_candidate_from_application,
    extract_candidate_from_lead,
    extract_job_features,
)
from haulmatch.services.match_types import CandidateFeatures, JobFeatures
from tests.conftest import TEST_COMPANY_ID
from tests.fakes import NOW, make_application, make_job, make_lead


@pytest.fixture
def job() -> JobFeatures:
    return extract_job_features(make_job(TEST_COMPANY_ID))


def _candidate(**overrides) -> CandidateFeatures:
    values = {"candidate_id": uuid.uuid4(), "source": "application"}
    values.update(overrides)
    return CandidateFeatures(**values)


# =============================================================================
# Applications
# =============================================================================


class TestApplicationCandidate:
    def test_strong_application(self, job: JobFeatures) -> None:
        candidate = extract_candidate_from_application(
            make_application(TEST_COMPANY_ID)
        )

        result = compute_company_candidate_rules_score(candidate, job, NOW)

        breakdown = {k: v.score for k, v in result.score_breakdown.items()}
        assert breakdown == {
            "driverType": 20,
            "licenseClass": 20,
            "experience": 11,
            "routeFreightTeam": 20,
            "location": 6,
            "recency": 5,
        }
        assert result.rules_score == 82
        assert [r.text for r in result.top_reasons] == [
            "Driver type matches (owner-operator)",
            "Class A CDL holder",
            "3-5 driving experience",
        ]
        assert result.cautions == ()

    def test_mismatched_type_is_not_capped(self, job: JobFeatures) -> None:
        candidate = _candidate(
            driver_type="company",
            license_class="a",
            years_exp="5+",
            state="Texas",
            solo_team="solo",
            hauler_experience=frozenset({"tanker"}),
            route_prefs=frozenset({"otr"}),
            created_at=NOW,
        )

        result = compute_company_candidate_rules_score(candidate, job, NOW)

        assert result.score_breakdown["driverType"].score == 0
        assert result.rules_score == 70
        assert result.cautions[0].text == (
            "Driver type mismatch (company vs owner-operator)"
        )


# =============================================================================
# Leads
# =============================================================================


class TestLeadCandidate:
    def test_sparse_lead_reports_missing_fields(self, job: JobFeatures) -> None:
        lead = make_lead(TEST_COMPANY_ID, years_exp=None, state=None, is_owner_op=None)
        candidate = extract_candidate_from_lead(lead)

        result = compute_company_candidate_rules_score(candidate, job, NOW)

        assert candidate.missing_fields == ("experience", "state", "driver type")
        assert [c.text for c in result.cautions] == [
            "Limited data — experience not available",
            "Limited data — state not available",
        ]
        # Only the neutral team points and the 10-day recency points remain
        assert result.rules_score == 6

    def test_owner_operator_lead(self, job: JobFeatures) -> None:
        candidate = extract_candidate_from_lead(make_lead(TEST_COMPANY_ID))

        result = compute_company_candidate_rules_score(candidate, job, NOW)

        assert candidate.missing_fields == ()
        assert result.score_breakdown["driverType"].score == 20
        assert result.score_breakdown["licenseClass"].score == 0
        assert result.score_breakdown["location"].score == 10
        assert result.rules_score == 43


# =============================================================================
# Components
# =============================================================================


class TestComponents:
    def test_unknown_driver_type_scores_zero(self, job: JobFeatures) -> None:
        outcome = score_driver_type(_candidate(), job)
        assert outcome.score.score == 0
        assert outcome.reasons == ()

    def test_unspecified_job_type_is_neutral(self) -> None:
        outcome = score_driver_type(
            _candidate(driver_type="company"), JobFeatures(job_id=uuid.uuid4())
        )
        assert outcome.score.score == 10

    @pytest.mark.parametrize(
        ("license_class", "points"),
        [("a", 20), ("b", 14), ("c", 8), ("permit", 4), (None, 0)],
    )
    def test_license_class(self, license_class, points) -> None:
        outcome = score_license_class(_candidate(license_class=license_class))
        assert outcome.score.score == points

    def test_route_freight_team_partial_credit(self, job: JobFeatures) -> None:
        candidate = _candidate(
            route_prefs=frozenset({"regional"}),
            hauler_experience=frozenset({"box", "flatbed", "dryVan", "refrigerated"}),
            solo_team="team",
        )
        outcome = score_route_freight_team(candidate, job)
        assert outcome.score.score == 8
        assert outcome.reasons == ()

    def test_route_freight_team_unspecified_job(self) -> None:
        outcome = score_route_freight_team(
            _candidate(), JobFeatures(job_id=uuid.uuid4())
        )
        assert outcome.score.score == 11


class TestRecency:
    @pytest.mark.parametrize(
        ("days", "points"), [(0, 5), (7, 5), (8, 3), (30, 3), (31, 1), (400, 1)]
    )
    def test_recency_buckets(self, days, points) -> None:
        candidate = _candidate(created_at=NOW - timedelta(days=days))
        assert score_recency(candidate, NOW).score.score == points

    def test_missing_date(self) -> None:
        assert score_recency(_candidate(), NOW).score.score == 2

    def test_naive_datetimes_are_utc(self) -> None:
        candidate = _candidate(created_at=datetime(2026, 3, 9, 12, 0))
        outcome = score_recency(candidate, NOW)
        assert outcome.score.score == 5
        assert outcome.reasons[0].text == "Applied/submitted recently"
