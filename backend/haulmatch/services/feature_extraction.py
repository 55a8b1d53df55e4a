"""Build scorer inputs from inbound records.

Drivers are the merge of their profile and their most recent application:
profile fields win, application fields fill the gaps, and the solo/team
preference, endorsements, hauler experience and route preferences come from
the application only.
"""

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from haulmatch.models.records import Application, DriverProfile, Job, Lead
from haulmatch.services.match_types import (
    CandidateFeatures,
    DriverFeatures,
    JobFeatures,
)
from haulmatch.services.normalize import (
    normalize_driver_type,
    normalize_experience,
    normalize_freight_type,
    normalize_license_class,
    normalize_route_type,
    normalize_team_pref,
)
from haulmatch.services.text_blocks import (
    build_driver_text,
    build_job_text,
    build_lead_text,
)

# Driver profile completeness checklist, in display order
DRIVER_PROFILE_FIELDS = (
    "driver type",
    "license class",
    "years of experience",
    "license state",
    "zip code",
    "about me",
    "route preferences",
    "freight experience",
    "endorsements",
)


def _flag_set(
    flags: Any, normalizer: Callable[[object], str | None] | None = None
) -> frozenset[str]:
    """Reduce a JSONB {key: bool} map to the set of true keys.

    Keys are passed through normalizer (if given) so that "reefer" and
    "refrigerated" land on the same canonical value.
    """
    if not isinstance(flags, Mapping):
        return frozenset()
    keys: set[str] = set()
    for key, value in flags.items():
        if not value:
            continue
        canonical = normalizer(key) if normalizer else key
        if canonical:
            keys.add(canonical)
    return frozenset(keys)


def _coalesce(*values: Any) -> Any:
    for value in values:
        if value not in (None, ""):
            return value
    return None


def _as_datetime(value: Any) -> datetime | None:
    """Accept a datetime or ISO-8601 string; anything else is unknown."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None


# =============================================================================
# Drivers
# =============================================================================


def extract_driver_features(
    profile: DriverProfile, application: Application | None = None
) -> DriverFeatures:
    """Build DriverFeatures from a profile and its most recent application.

    Args:
        profile: The driver's profile.
        application: The driver's most recently updated application, if any.

    Returns:
        DriverFeatures with canonical values and the driver text block.
    """
    app = application
    return DriverFeatures(
        driver_id=profile.id,
        driver_type=normalize_driver_type(
            _coalesce(profile.driver_type, app and app.driver_type)
        ),
        license_class=normalize_license_class(
            _coalesce(profile.license_class, app and app.license_class)
        ),
        years_exp=normalize_experience(
            _coalesce(profile.years_exp, app and app.years_exp)
        ),
        license_state=_coalesce(profile.license_state, app and app.license_state),
        zip_code=_coalesce(profile.zip_code, app and app.zip_code),
        about=_coalesce(profile.about),
        solo_team=normalize_team_pref(app.solo_team) if app else None,
        endorsements=_flag_set(app.endorse) if app else frozenset(),
        hauler_experience=(
            _flag_set(app.hauler, normalize_freight_type) if app else frozenset()
        ),
        route_prefs=_flag_set(app.route, normalize_route_type) if app else frozenset(),
        text_block=build_driver_text(profile, app),
    )


def derive_missing_fields(driver: DriverFeatures) -> list[str]:
    """List the profile fields the driver has not filled in.

    Returns:
        Subset of DRIVER_PROFILE_FIELDS, in checklist order.
    """
    present = {
        "driver type": driver.driver_type,
        "license class": driver.license_class,
        "years of experience": driver.years_exp,
        "license state": driver.license_state,
        "zip code": driver.zip_code,
        "about me": driver.about,
        "route preferences": driver.route_prefs,
        "freight experience": driver.hauler_experience,
        "endorsements": driver.endorsements,
    }
    return [name for name in DRIVER_PROFILE_FIELDS if not present[name]]


# =============================================================================
# Jobs
# =============================================================================


def extract_job_features(job: Job) -> JobFeatures:
    """Build JobFeatures from a job posting."""
    return JobFeatures(
        job_id=job.id,
        company_id=job.company_id,
        title=job.title or "",
        description=job.description or "",
        driver_type=normalize_driver_type(job.driver_type),
        route_type=normalize_route_type(job.route_type),
        freight_type=normalize_freight_type(job.freight_type),
        team_driving=normalize_team_pref(job.team_driving),
        location=job.location,
        pay=job.pay,
        status=job.status or "Active",
        text_block=build_job_text(job),
    )


# =============================================================================
# Candidates
# =============================================================================


def extract_candidate_from_application(app: Application) -> CandidateFeatures:
    """Build CandidateFeatures from an application.

    Applications carry a complete form, so missing_fields is always empty.
    Recency is measured from submitted_at, falling back to created_at.
    """
    name = f"{app.first_name or ''} {app.last_name or ''}".strip()
    return CandidateFeatures(
        candidate_id=app.id,
        source="application",
        candidate_driver_id=app.driver_id,
        name=name,
        driver_type=normalize_driver_type(app.driver_type),
        license_class=normalize_license_class(app.license_class),
        years_exp=normalize_experience(app.years_exp),
        state=app.license_state,
        solo_team=normalize_team_pref(app.solo_team),
        endorsements=_flag_set(app.endorse),
        hauler_experience=_flag_set(app.hauler, normalize_freight_type),
        route_prefs=_flag_set(app.route, normalize_route_type),
        created_at=_as_datetime(_coalesce(app.submitted_at, app.created_at)),
        text_block=build_driver_text(app, app),
        missing_fields=(),
    )


def extract_candidate_from_lead(lead: Lead) -> CandidateFeatures:
    """Build CandidateFeatures from a lead.

    Leads never carry license class, solo/team, endorsements, hauler or route
    data. Driver type is known only when is_owner_op is True
    ("owner-operator"); False is a known answer that maps to no type, while
    None is reported as a missing field.
    """
    missing: list[str] = []
    if not lead.years_exp:
        missing.append("experience")
    if not lead.state:
        missing.append("state")
    if lead.is_owner_op is None:
        missing.append("driver type")

    return CandidateFeatures(
        candidate_id=lead.id,
        source="lead",
        candidate_driver_id=None,
        name=lead.full_name or "",
        driver_type="owner-operator" if lead.is_owner_op else None,
        years_exp=normalize_experience(lead.years_exp),
        state=lead.state,
        created_at=_as_datetime(lead.created_at),
        text_block=build_lead_text(lead),
        missing_fields=tuple(missing),
    )
