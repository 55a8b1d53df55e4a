"""Read-only queries over the inbound marketplace records.

Drivers, jobs, applications and leads are owned by the marketplace
application; the matching pipeline never writes them.
"""

import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from haulmatch.models.records import (
    JOB_STATUS_ACTIVE,
    Application,
    DriverProfile,
    Job,
    Lead,
)


class RecordRepository:
    """Stateless repository for inbound record reads.

    All methods are static. Pass an AsyncSession for every call so the
    caller controls transaction boundaries.
    """

    @staticmethod
    async def get_driver_profile(
        db: AsyncSession, driver_id: uuid.UUID
    ) -> DriverProfile | None:
        return await db.get(DriverProfile, driver_id)

    @staticmethod
    async def list_driver_profiles(
        db: AsyncSession,
        *,
        updated_since: datetime | None = None,
    ) -> list[DriverProfile]:
        """Fetch driver profiles, optionally only those updated since a time.

        Args:
            db: Async database session.
            updated_since: Lower bound on updated_at (inclusive), or None for all.

        Returns:
            Profiles ordered by id for a stable iteration order.
        """
        stmt = select(DriverProfile)
        if updated_since is not None:
            stmt = stmt.where(DriverProfile.updated_at >= updated_since)
        result = await db.execute(stmt.order_by(DriverProfile.id))
        return list(result.scalars().all())

    @staticmethod
    async def get_latest_application_for_driver(
        db: AsyncSession, driver_id: uuid.UUID
    ) -> Application | None:
        """Fetch the driver's most recently updated application, if any."""
        stmt = (
            select(Application)
            .where(Application.driver_id == driver_id)
            .order_by(Application.updated_at.desc())
            .limit(1)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def get_job(db: AsyncSession, job_id: uuid.UUID) -> Job | None:
        return await db.get(Job, job_id)

    @staticmethod
    async def list_active_jobs(
        db: AsyncSession,
        *,
        company_id: uuid.UUID | None = None,
    ) -> list[Job]:
        """Fetch Active jobs, optionally for one company.

        Args:
            db: Async database session.
            company_id: Restrict to this company's jobs, or None for all.

        Returns:
            Active jobs ordered by id.
        """
        stmt = select(Job).where(Job.status == JOB_STATUS_ACTIVE)
        if company_id is not None:
            stmt = stmt.where(Job.company_id == company_id)
        result = await db.execute(stmt.order_by(Job.id))
        return list(result.scalars().all())

    @staticmethod
    async def get_application(
        db: AsyncSession, application_id: uuid.UUID
    ) -> Application | None:
        return await db.get(Application, application_id)

    @staticmethod
    async def list_company_applications(
        db: AsyncSession, company_id: uuid.UUID
    ) -> list[Application]:
        stmt = (
            select(Application)
            .where(Application.company_id == company_id)
            .order_by(Application.id)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_lead(db: AsyncSession, lead_id: uuid.UUID) -> Lead | None:
        return await db.get(Lead, lead_id)

    @staticmethod
    async def list_company_leads(
        db: AsyncSession, company_id: uuid.UUID
    ) -> list[Lead]:
        stmt = select(Lead).where(Lead.company_id == company_id).order_by(Lead.id)
        result = await db.execute(stmt)
        return list(result.scalars().all())
