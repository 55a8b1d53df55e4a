"""Company → Candidate rules-based scoring.

Scores a candidate (application or lead) against one of the company's jobs,
from the hiring side. Weights differ from the driver-side scorer:

- driverType:       20
- licenseClass:     20
- experience:       15
- routeFreightTeam: 20 (route 7, freight 7, team 6)
- location:         10
- recency:           5

Total: 90. There is no hard-block cap in this direction: a company browsing
candidates still sees a low score rather than an exclusion.

Unknown candidate data scores 0 here (not neutral), except team and recency.
"""

from datetime import UTC, datetime

from haulmatch.services.match_types import (
    CandidateFeatures,
    ComponentOutcome,
    ComponentScore,
    JobFeatures,
    MatchReason,
    MatchResult,
    aggregate_outcomes,
)
from haulmatch.services.normalize import (
    are_neighboring_states,
    experience_ordinal,
    extract_state,
    normalize_driver_type,
    normalize_freight_type,
    normalize_license_class,
    normalize_route_type,
    normalize_team_pref,
)

_LICENSE_OTHER_POINTS = 4

# Experience points indexed by ordinal: none, <1yr, 1-3, 3-5, 5+
_EXPERIENCE_POINTS = (2, 4, 7, 11, 15)

ROUTE_FREIGHT_TEAM_MAX = 20
VERSATILE_HAULER_COUNT = 4

# Recency thresholds (days since submission)
RECENT_DAYS = 7
ACTIVE_DAYS = 30

MISSING_FIELD_CAUTION = "Limited data — {field} not available"


# =============================================================================
# Component Scorers
# =============================================================================


def score_driver_type(
    candidate: CandidateFeatures, job: JobFeatures
) -> ComponentOutcome:
    """Driver type fit (20). Mismatch is a caution, never a hard block."""
    c = normalize_driver_type(candidate.driver_type)
    j = normalize_driver_type(job.driver_type)

    if c is None:
        return ComponentOutcome(ComponentScore(0, 20, "Driver type unknown"))
    if j is None:
        return ComponentOutcome(ComponentScore(10, 20, "Job driver type not specified"))

    if c == j:
        return ComponentOutcome(
            ComponentScore(20, 20, f"Exact match: {c}"),
            (MatchReason(f"Driver type matches ({c})", True),),
        )

    if {c, j} == {"owner-operator", "lease"}:
        return ComponentOutcome(
            ComponentScore(12, 20, f"Compatible: {c} ↔ {j}"),
            (MatchReason(f"Driver type compatible ({c} ↔ {j})", True),),
        )

    return ComponentOutcome(
        ComponentScore(0, 20, f"Mismatch: {c} vs {j}"),
        (MatchReason(f"Driver type mismatch ({c} vs {j})", False),),
    )


def score_license_class(candidate: CandidateFeatures) -> ComponentOutcome:
    """License class (20)."""
    license_class = normalize_license_class(candidate.license_class)
    if license_class is None:
        return ComponentOutcome(ComponentScore(0, 20, "License class unknown"))

    if license_class == "a":
        return ComponentOutcome(
            ComponentScore(20, 20, "Class A"),
            (MatchReason("Class A CDL holder", True),),
        )
    if license_class == "b":
        return ComponentOutcome(
            ComponentScore(14, 20, "Class B"),
            (MatchReason("Class B CDL holder", True),),
        )
    if license_class == "c":
        return ComponentOutcome(ComponentScore(8, 20, "Class C"))

    return ComponentOutcome(ComponentScore(_LICENSE_OTHER_POINTS, 20, "Permit only"))


def score_experience(candidate: CandidateFeatures) -> ComponentOutcome:
    """Experience (15)."""
    ordinal = experience_ordinal(candidate.years_exp)
    if ordinal < 0:
        return ComponentOutcome(ComponentScore(0, 15, "Experience data unavailable"))

    reasons: tuple[MatchReason, ...] = ()
    if ordinal >= 3:
        reasons = (MatchReason(f"{candidate.years_exp} driving experience", True),)

    return ComponentOutcome(
        ComponentScore(
            _EXPERIENCE_POINTS[ordinal], 15, f"Experience: {candidate.years_exp}"
        ),
        reasons,
    )


def score_route_freight_team(
    candidate: CandidateFeatures, job: JobFeatures
) -> ComponentOutcome:
    """Combined route (7), freight (7) and team (6) block, capped at 20."""
    reasons: list[MatchReason] = []
    score = 0

    # Route
    job_route = normalize_route_type(job.route_type)
    prefs = candidate.route_prefs
    if job_route is None:
        score += 4
    elif not prefs:
        pass
    elif job_route in prefs:
        score += 7
        reasons.append(MatchReason(f"Route preference aligns ({job_route})", True))
    elif (job_route == "otr" and "regional" in prefs) or (
        job_route == "regional" and "otr" in prefs
    ):
        score += 4

    # Freight
    job_freight = normalize_freight_type(job.freight_type)
    hauler = candidate.hauler_experience
    if job_freight is None:
        score += 4
    elif not hauler:
        pass
    elif job_freight in hauler:
        score += 7
        reasons.append(MatchReason(f"Hauler experience matches ({job_freight})", True))
    elif len(hauler) >= VERSATILE_HAULER_COUNT:
        score += 4

    # Team
    c_team = normalize_team_pref(candidate.solo_team)
    j_team = normalize_team_pref(job.team_driving)
    if c_team is None or j_team is None:
        score += 3
    elif c_team == j_team or "both" in (c_team, j_team):
        score += 6

    return ComponentOutcome(
        ComponentScore(
            min(score, ROUTE_FREIGHT_TEAM_MAX),
            ROUTE_FREIGHT_TEAM_MAX,
            "Route/freight/team combined",
        ),
        tuple(reasons),
    )


def score_location(candidate: CandidateFeatures, job: JobFeatures) -> ComponentOutcome:
    """Location (10): candidate state vs job location."""
    c_state = extract_state(candidate.state)
    j_state = extract_state(job.location)

    if c_state is None or j_state is None:
        return ComponentOutcome(ComponentScore(0, 10, "Location data unavailable"))

    if c_state == j_state:
        return ComponentOutcome(
            ComponentScore(10, 10, f"Same state: {c_state}"),
            (MatchReason(f"Located in same state ({c_state})", True),),
        )

    if are_neighboring_states(c_state, j_state):
        return ComponentOutcome(
            ComponentScore(6, 10, f"Neighboring: {c_state} ↔ {j_state}")
        )

    return ComponentOutcome(
        ComponentScore(2, 10, f"Different state: {c_state} vs {j_state}")
    )


def score_recency(candidate: CandidateFeatures, now: datetime) -> ComponentOutcome:
    """Recency (5): how fresh the application or lead is.

    Args:
        candidate: Candidate features; created_at may be None.
        now: Reference time. Naive datetimes are treated as UTC.
    """
    created_at = candidate.created_at
    if created_at is None:
        return ComponentOutcome(ComponentScore(2, 5, "No activity date"))

    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    days_since = (now - created_at).days

    if days_since <= RECENT_DAYS:
        return ComponentOutcome(
            ComponentScore(5, 5, f"{days_since}d ago"),
            (MatchReason("Applied/submitted recently", True),),
        )
    if days_since <= ACTIVE_DAYS:
        return ComponentOutcome(ComponentScore(3, 5, f"{days_since}d ago"))
    return ComponentOutcome(ComponentScore(1, 5, f"{days_since}d ago"))


# =============================================================================
# Aggregation
# =============================================================================


def compute_company_candidate_rules_score(
    candidate: CandidateFeatures,
    job: JobFeatures,
    now: datetime,
) -> MatchResult:
    """Compute the rules-only match result for a (candidate, job) pair.

    Args:
        candidate: Normalized candidate features.
        job: Normalized job features.
        now: Reference time for the recency component.

    Returns:
        MatchResult with rules_score in [0, 90]. One caution per missing
        field is appended after the component cautions.
    """
    outcomes = [
        ("driverType", score_driver_type(candidate, job)),
        ("licenseClass", score_license_class(candidate)),
        ("experience", score_experience(candidate)),
        ("routeFreightTeam", score_route_freight_team(candidate, job)),
        ("location", score_location(candidate, job)),
        ("recency", score_recency(candidate, now)),
    ]
    missing = [
        MatchReason(MISSING_FIELD_CAUTION.format(field=name), False)
        for name in candidate.missing_fields
    ]
    return aggregate_outcomes(outcomes, extra_cautions=missing)
