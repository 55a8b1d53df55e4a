"""Driver → Job rules-based scoring.

Scores how well a job fits a driver, from the driver's perspective.

Components (max points):
- driverType: 20 (hard block on incompatible types)
- route:      15
- freight:    15
- team:       10
- location:   10
- experience: 10
- license:    10

Total: 90. The semantic layer adds up to 10 on top (see score_composer).

Missing data on either side scores a neutral value; it never raises.
"""

from haulmatch.services.match_types import (
    ComponentOutcome,
    ComponentScore,
    DriverFeatures,
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

# Aggregate cap when the driver type is a fundamental mismatch
HARD_BLOCK_CAP = 40

# Experience points indexed by ordinal: none, <1yr, 1-3, 3-5, 5+
_EXPERIENCE_POINTS = (2, 4, 6, 8, 10)

_LICENSE_BASE_POINTS = {"a": 6, "b": 4, "c": 2, "permit": 1}
_LICENSE_UNKNOWN_POINTS = 3

TANKER_ENDORSEMENTS = frozenset({"tankVehicles", "tankerHazmat"})
HAZMAT_ENDORSEMENTS = frozenset({"hazmat", "tankerHazmat"})

# Versatile haulers get partial freight credit on a non-match
VERSATILE_HAULER_COUNT = 4


def _compatible_driver_types(a: str, b: str) -> bool:
    return {a, b} == {"owner-operator", "lease"}


def _partial_route_match(job_route: str, prefs: frozenset[str]) -> bool:
    return (job_route == "otr" and "regional" in prefs) or (
        job_route == "regional" and "otr" in prefs
    )


# =============================================================================
# Component Scorers
# =============================================================================


def score_driver_type(driver: DriverFeatures, job: JobFeatures) -> ComponentOutcome:
    """Driver type fit (20). Incompatible types set the hard-block flag."""
    d = normalize_driver_type(driver.driver_type)
    j = normalize_driver_type(job.driver_type)

    if d is None or j is None:
        return ComponentOutcome(ComponentScore(10, 20, "Driver type data unavailable"))

    if d == j:
        return ComponentOutcome(
            ComponentScore(20, 20, f"Exact match: {d}"),
            (MatchReason(f"Your driver type ({d}) matches this position", True),),
        )

    if _compatible_driver_types(d, j):
        return ComponentOutcome(
            ComponentScore(12, 20, f"Compatible: {d} ↔ {j}"),
            (MatchReason(f"{d} is compatible with {j} position", True),),
        )

    return ComponentOutcome(
        ComponentScore(0, 20, f"Mismatch: {d} vs {j}"),
        (MatchReason(f"Position requires {j} but you are {d}", False),),
        hard_blocked=True,
    )


def score_route(driver: DriverFeatures, job: JobFeatures) -> ComponentOutcome:
    """Route fit (15)."""
    job_route = normalize_route_type(job.route_type)
    if job_route is None:
        return ComponentOutcome(ComponentScore(8, 15, "Job route type not specified"))

    prefs = driver.route_prefs
    if not prefs:
        return ComponentOutcome(ComponentScore(8, 15, "No route preferences set"))

    if job_route in prefs:
        return ComponentOutcome(
            ComponentScore(15, 15, f"Route match: {job_route}"),
            (MatchReason(f"Your {job_route.upper()} route preference matches", True),),
        )

    if _partial_route_match(job_route, prefs):
        return ComponentOutcome(
            ComponentScore(10, 15, "Partial route match"),
            (
                MatchReason(
                    f"Your route preference partially aligns ({job_route})", True
                ),
            ),
        )

    return ComponentOutcome(
        ComponentScore(3, 15, f"Route mismatch: {job_route}"),
        (
            MatchReason(
                f"This job is {job_route.upper()} which doesn't match your route preferences",
                False,
            ),
        ),
    )


def score_freight(driver: DriverFeatures, job: JobFeatures) -> ComponentOutcome:
    """Freight fit (15), from the driver's hauler experience."""
    job_freight = normalize_freight_type(job.freight_type)
    if job_freight is None:
        return ComponentOutcome(ComponentScore(8, 15, "Job freight type not specified"))

    hauler = driver.hauler_experience
    if not hauler:
        return ComponentOutcome(ComponentScore(5, 15, "No hauler experience data"))

    if job_freight in hauler:
        return ComponentOutcome(
            ComponentScore(15, 15, f"Freight match: {job_freight}"),
            (MatchReason(f"You have experience with {job_freight} freight", True),),
        )

    if len(hauler) >= VERSATILE_HAULER_COUNT:
        return ComponentOutcome(
            ComponentScore(10, 15, "Versatile hauler, no exact match"),
            (MatchReason("Your broad hauler experience may apply", True),),
        )

    return ComponentOutcome(ComponentScore(3, 15, f"No {job_freight} experience"))


def score_team(driver: DriverFeatures, job: JobFeatures) -> ComponentOutcome:
    """Solo/team fit (10). "both" on either side is compatible."""
    d = normalize_team_pref(driver.solo_team)
    j = normalize_team_pref(job.team_driving)

    if d is None or j is None:
        return ComponentOutcome(
            ComponentScore(5, 10, "Team preference data unavailable")
        )

    if d == j or "both" in (d, j):
        return ComponentOutcome(
            ComponentScore(10, 10, f"Team match: {d} ↔ {j}"),
            (MatchReason(f"Team driving preference aligns ({j})", True),),
        )

    return ComponentOutcome(
        ComponentScore(0, 10, f"Team mismatch: {d} vs {j}"),
        (MatchReason(f"Job is {j} but you prefer {d}", False),),
    )


def score_location(driver: DriverFeatures, job: JobFeatures) -> ComponentOutcome:
    """Location fit (10): driver license state vs job location."""
    driver_state = extract_state(driver.license_state)
    job_state = extract_state(job.location)

    if driver_state is None or job_state is None:
        return ComponentOutcome(ComponentScore(5, 10, "Location data unavailable"))

    if driver_state == job_state:
        return ComponentOutcome(
            ComponentScore(10, 10, f"Same state: {driver_state}"),
            (MatchReason(f"Job is in your state ({driver_state})", True),),
        )

    if are_neighboring_states(driver_state, job_state):
        return ComponentOutcome(
            ComponentScore(6, 10, f"Neighboring: {driver_state} ↔ {job_state}"),
            (MatchReason(f"Job is in a neighboring state ({job_state})", True),),
        )

    return ComponentOutcome(
        ComponentScore(2, 10, f"Different state: {driver_state} vs {job_state}"),
        (MatchReason(f"Job is in {job_state}; relocation may apply", False),),
    )


def score_experience(driver: DriverFeatures) -> ComponentOutcome:
    """Experience fit (10)."""
    ordinal = experience_ordinal(driver.years_exp)
    if ordinal < 0:
        return ComponentOutcome(ComponentScore(5, 10, "Experience data unavailable"))

    reasons: tuple[MatchReason, ...] = ()
    if ordinal >= 3:
        reasons = (
            MatchReason(f"Your {driver.years_exp} experience is highly valued", True),
        )
    elif ordinal >= 2:
        reasons = (
            MatchReason(
                f"Your experience level ({driver.years_exp}) meets expectations", True
            ),
        )

    return ComponentOutcome(
        ComponentScore(
            _EXPERIENCE_POINTS[ordinal],
            10,
            f"Experience: {driver.years_exp} (ordinal {ordinal})",
        ),
        reasons,
    )


def score_license(driver: DriverFeatures, job: JobFeatures) -> ComponentOutcome:
    """License class and endorsement fit (10).

    Base points by class, then one endorsement bonus:
    - tanker job with a tank endorsement: +4
    - otherwise any hazmat endorsement: +2
    - otherwise: +1

    A tanker job without a tank endorsement also adds a caution.
    """
    license_class = normalize_license_class(driver.license_class)
    reasons: list[MatchReason] = []

    score = _LICENSE_BASE_POINTS.get(license_class or "", _LICENSE_UNKNOWN_POINTS)
    if license_class == "a":
        reasons.append(MatchReason("Class A CDL qualifies for this position", True))

    endorsements = driver.endorsements
    is_tanker_job = normalize_freight_type(job.freight_type) == "tanker"

    if is_tanker_job and endorsements & TANKER_ENDORSEMENTS:
        score += 4
        reasons.append(
            MatchReason("Your tanker endorsement matches this freight type", True)
        )
    elif endorsements & HAZMAT_ENDORSEMENTS:
        score += 2
    else:
        score += 1

    if is_tanker_job and not endorsements & TANKER_ENDORSEMENTS:
        reasons.append(
            MatchReason("Tanker endorsement may be required for this position", False)
        )

    return ComponentOutcome(
        ComponentScore(
            min(score, 10), 10, f"License: {license_class}, endorsements applied"
        ),
        tuple(reasons),
    )


# =============================================================================
# Aggregation
# =============================================================================


def compute_driver_job_rules_score(
    driver: DriverFeatures, job: JobFeatures
) -> MatchResult:
    """Compute the rules-only match result for a (driver, job) pair.

    Args:
        driver: Normalized driver features.
        job: Normalized job features.

    Returns:
        MatchResult with rules_score in [0, 90] (at most 40 if the driver
        type is a hard mismatch), overall_score equal to rules_score and no
        semantic score.
    """
    outcomes = [
        ("driverType", score_driver_type(driver, job)),
        ("route", score_route(driver, job)),
        ("freight", score_freight(driver, job)),
        ("team", score_team(driver, job)),
        ("location", score_location(driver, job)),
        ("experience", score_experience(driver)),
        ("license", score_license(driver, job)),
    ]
    return aggregate_outcomes(outcomes, hard_block_cap=HARD_BLOCK_CAP)
