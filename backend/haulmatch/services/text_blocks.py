"""PII-free text blocks fed to the embedding provider.

Only matching-relevant attributes go in: no names, no contact details, no
zip codes. Parts are joined with ". " and empty parts are skipped, so the same
record always produces the same text (and the same content hash).
"""

from collections.abc import Mapping
from typing import Any


def _true_keys(flags: Any) -> list[str]:
    if not isinstance(flags, Mapping):
        return []
    return [str(key) for key, value in flags.items() if value]


def build_driver_text(profile: Any, application: Any = None) -> str:
    """Build the text block for a driver.

    Args:
        profile: Object with driver_type, license_class, years_exp,
            license_state and optionally about (a DriverProfile, or an
            Application when scoring the application as a candidate).
        application: Optional application contributing solo/team,
            endorsements, hauler experience and route preferences.

    Returns:
        Text block, possibly empty.
    """
    parts: list[str] = []

    about = getattr(profile, "about", None)
    if about:
        parts.append(about)
    if profile.driver_type:
        parts.append(f"Driver type: {profile.driver_type}")
    if profile.license_class:
        parts.append(f"License: Class {profile.license_class.upper()}")
    if profile.years_exp:
        parts.append(f"Experience: {profile.years_exp}")
    if profile.license_state:
        parts.append(f"State: {profile.license_state}")

    if application is not None:
        if application.solo_team:
            parts.append(f"Prefers: {application.solo_team}")
        endorsements = _true_keys(application.endorse)
        if endorsements:
            parts.append(f"Endorsements: {', '.join(endorsements)}")
        haulers = _true_keys(application.hauler)
        if haulers:
            parts.append(f"Hauler experience: {', '.join(haulers)}")
        routes = _true_keys(application.route)
        if routes:
            parts.append(f"Route preferences: {', '.join(routes)}")

    return ". ".join(parts)


def build_job_text(job: Any) -> str:
    """Build the text block for a job posting."""
    parts: list[str] = []

    if job.title:
        parts.append(job.title)
    if job.description:
        parts.append(job.description)
    if job.freight_type:
        parts.append(f"Freight: {job.freight_type}")
    if job.driver_type:
        parts.append(f"Driver type: {job.driver_type}")
    if job.route_type:
        parts.append(f"Route: {job.route_type}")
    if job.team_driving:
        parts.append(f"Team: {job.team_driving}")
    if job.location:
        parts.append(f"Location: {job.location}")
    if job.pay:
        parts.append(f"Pay: {job.pay}")

    return ". ".join(parts)


def build_lead_text(lead: Any) -> str:
    """Build the text block for a lead. The lead's name is never included."""
    parts: list[str] = []

    if lead.state:
        parts.append(f"State: {lead.state}")
    if lead.years_exp:
        parts.append(f"Experience: {lead.years_exp}")
    if lead.is_owner_op:
        parts.append("Owner-operator with own truck")
    truck = [p for p in (lead.truck_year, lead.truck_make, lead.truck_model) if p]
    if truck:
        parts.append(f"Truck: {' '.join(truck)}")

    return ". ".join(parts)
