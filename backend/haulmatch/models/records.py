"""Inbound records owned by the marketplace application.

driver_profiles, jobs, applications and leads are created and edited
elsewhere; the matching pipeline only reads them. They are mapped here so the
repositories can query them, but no migration in this repository creates
them.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, Text, func, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from haulmatch.models.base import Base, TimestampMixin

_DEFAULT_UUID = text("gen_random_uuid()")

# Job status values. Only Active jobs are matched.
JOB_STATUS_ACTIVE = "Active"
JOB_STATUSES = ("Draft", "Active", "Paused", "Closed")


class DriverProfile(Base, TimestampMixin):
    """A driver's profile (the job seeker side)."""

    __tablename__ = "driver_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    driver_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    license_class: Mapped[str | None] = mapped_column(String(20), nullable=True)
    years_exp: Mapped[str | None] = mapped_column(String(20), nullable=True)
    license_state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    about: Mapped[str | None] = mapped_column(Text, nullable=True)


class Job(Base, TimestampMixin):
    """A company's job posting.

    The freight type lives in column "type"; it is mapped as freight_type.
    """

    __tablename__ = "jobs"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    company_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )
    title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    driver_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    route_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    freight_type: Mapped[str | None] = mapped_column("type", String(50), nullable=True)
    team_driving: Mapped[str | None] = mapped_column(String(20), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    pay: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20),
        server_default=text("'Draft'"),
        nullable=False,
    )


class Application(Base, TimestampMixin):
    """A driver's application to a company (optionally to a specific job).

    endorse, hauler and route are JSONB maps of key -> bool, e.g.
    {"hazmat": true, "tankVehicles": false}.
    """

    __tablename__ = "applications"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    driver_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )
    company_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )
    job_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    driver_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    license_class: Mapped[str | None] = mapped_column(String(20), nullable=True)
    years_exp: Mapped[str | None] = mapped_column(String(20), nullable=True)
    license_state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    solo_team: Mapped[str | None] = mapped_column(String(20), nullable=True)
    endorse: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    hauler: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    route: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    submitted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )


class Lead(Base):
    """A raw sales lead attached to a company.

    is_owner_op is tri-state: None means the lead never answered.
    """

    __tablename__ = "leads"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    company_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        nullable=True,
    )
    full_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    years_exp: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_owner_op: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    truck_year: Mapped[str | None] = mapped_column(String(10), nullable=True)
    truck_make: Mapped[str | None] = mapped_column(String(50), nullable=True)
    truck_model: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
