"""Shared types for driver/job and company/candidate matching.

Feature structs are the normalized inputs to the rule scorers; MatchResult is
their output and the unit the score composer and the persistence layer work
with. JSON shapes use camelCase keys because the score tables are read by the
web client directly.
"""

import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

CandidateSource = Literal["application", "lead"]

# Displayed reason limits
MAX_TOP_REASONS = 3
MAX_CAUTIONS = 2

# Rules scores are out of 90; the semantic layer adds up to 10.
RULES_MAX_SCORE = 90
SEMANTIC_MAX_SCORE = 10
OVERALL_MAX_SCORE = 100


# =============================================================================
# Score Components
# =============================================================================


@dataclass(frozen=True)
class ComponentScore:
    """Score for a single dimension (e.g. "driverType", "route").

    Attributes:
        score: Points awarded.
        max_score: Points available for this dimension.
        detail: Short human-readable explanation.
    """

    score: int
    max_score: int
    detail: str

    def to_dict(self) -> dict[str, Any]:
        return {"score": self.score, "maxScore": self.max_score, "detail": self.detail}


@dataclass(frozen=True)
class MatchReason:
    """A displayed reason. positive=False renders as a caution."""

    text: str
    positive: bool

    def to_dict(self) -> dict[str, Any]:
        return {"text": self.text, "positive": self.positive}


@dataclass(frozen=True)
class ComponentOutcome:
    """What one component scorer produced.

    Attributes:
        score: The component's points and detail.
        reasons: Positive reasons and cautions, in display order.
        hard_blocked: True if this component is a fundamental mismatch that
            caps the aggregate rules score.
    """

    score: ComponentScore
    reasons: tuple[MatchReason, ...] = ()
    hard_blocked: bool = False


# Ordered mapping: dimension name -> component score
ScoreBreakdown = dict[str, ComponentScore]


# =============================================================================
# Match Result
# =============================================================================


@dataclass(frozen=True)
class MatchResult:
    """Outcome of scoring one pair.

    Attributes:
        overall_score: Final score (0-100).
        rules_score: Deterministic rules score (0-90).
        semantic_score: Embedding bonus (0-10), or None when unavailable.
        score_breakdown: Per-dimension component scores, in scoring order.
        top_reasons: Up to 3 positive reasons.
        cautions: Up to 2 negative reasons.
        degraded_mode: True if computed without a semantic contribution.
    """

    overall_score: int
    rules_score: int
    semantic_score: int | None
    score_breakdown: ScoreBreakdown
    top_reasons: tuple[MatchReason, ...]
    cautions: tuple[MatchReason, ...]
    degraded_mode: bool = False

    def breakdown_to_dict(self) -> dict[str, dict[str, Any]]:
        return {name: comp.to_dict() for name, comp in self.score_breakdown.items()}

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys."""
        return {
            "overallScore": self.overall_score,
            "rulesScore": self.rules_score,
            "semanticScore": self.semantic_score,
            "scoreBreakdown": self.breakdown_to_dict(),
            "topReasons": [r.to_dict() for r in self.top_reasons],
            "cautions": [c.to_dict() for c in self.cautions],
            "degradedMode": self.degraded_mode,
        }


def aggregate_outcomes(
    outcomes: Sequence[tuple[str, ComponentOutcome]],
    hard_block_cap: int | None = None,
    extra_cautions: Iterable[MatchReason] = (),
) -> MatchResult:
    """Combine component outcomes into a rules-only MatchResult.

    Args:
        outcomes: (dimension name, outcome) pairs in scoring order.
        hard_block_cap: If set and any outcome is hard-blocked, the summed
            score is capped at this value.
        extra_cautions: Cautions appended after the component cautions
            (e.g. missing-data notes).

    Returns:
        MatchResult with overall_score == rules_score and no semantic score.
    """
    breakdown: ScoreBreakdown = {}
    positives: list[MatchReason] = []
    cautions: list[MatchReason] = []
    hard_blocked = False

    for name, outcome in outcomes:
        breakdown[name] = outcome.score
        for reason in outcome.reasons:
            (positives if reason.positive else cautions).append(reason)
        hard_blocked = hard_blocked or outcome.hard_blocked

    cautions.extend(extra_cautions)

    rules_score = sum(comp.score for comp in breakdown.values())
    if hard_blocked and hard_block_cap is not None:
        rules_score = min(rules_score, hard_block_cap)

    return MatchResult(
        overall_score=rules_score,
        rules_score=rules_score,
        semantic_score=None,
        score_breakdown=breakdown,
        top_reasons=tuple(positives[:MAX_TOP_REASONS]),
        cautions=tuple(cautions[:MAX_CAUTIONS]),
        degraded_mode=False,
    )


# =============================================================================
# Feature Structs
# =============================================================================


@dataclass(frozen=True)
class DriverFeatures:
    """Normalized driver attributes (profile merged with latest application).

    Boolean maps from the application (endorsements, hauler experience,
    route preferences) are reduced to the set of keys that are true.
    """

    driver_id: uuid.UUID
    driver_type: str | None = None
    license_class: str | None = None
    years_exp: str | None = None
    license_state: str | None = None
    zip_code: str | None = None
    about: str | None = None
    solo_team: str | None = None
    endorsements: frozenset[str] = frozenset()
    hauler_experience: frozenset[str] = frozenset()
    route_prefs: frozenset[str] = frozenset()
    text_block: str = ""


@dataclass(frozen=True)
class JobFeatures:
    """Normalized job attributes."""

    job_id: uuid.UUID
    company_id: uuid.UUID | None = None
    title: str = ""
    description: str = ""
    driver_type: str | None = None
    route_type: str | None = None
    freight_type: str | None = None
    team_driving: str | None = None
    location: str | None = None
    pay: str | None = None
    status: str = "Active"
    text_block: str = ""

    @property
    def is_active(self) -> bool:
        return self.status == "Active"


@dataclass(frozen=True)
class CandidateFeatures:
    """Normalized candidate attributes, from an application or a lead.

    Attributes:
        missing_fields: Data gaps surfaced as cautions ("experience", "state",
            "driver type"). Always empty for applications.
        created_at: Submission time used for the recency component.
    """

    candidate_id: uuid.UUID
    source: CandidateSource
    candidate_driver_id: uuid.UUID | None = None
    name: str = ""
    driver_type: str | None = None
    license_class: str | None = None
    years_exp: str | None = None
    state: str | None = None
    solo_team: str | None = None
    endorsements: frozenset[str] = frozenset()
    hauler_experience: frozenset[str] = frozenset()
    route_prefs: frozenset[str] = frozenset()
    created_at: datetime | None = None
    text_block: str = ""
    missing_fields: tuple[str, ...] = field(default_factory=tuple)
