"""In-memory MatchingStore and record builders for worker and backfill tests."""

import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from haulmatch.models.recompute_queue import (
    STATUS_DONE,
    STATUS_ERROR,
    STATUS_PENDING,
    STATUS_PROCESSING,
    RecomputeQueueItem,
)
from haulmatch.models.records import Application, DriverProfile, Job, Lead
from haulmatch.repositories.recompute_queue_repository import lease_expired_error
from haulmatch.services.matching_store import StoredEmbedding

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)

_QUEUE_FIELDS = (
    "status",
    "attempts",
    "scheduled_at",
    "started_at",
    "claim_token",
    "completed_at",
    "last_error",
)


# =============================================================================
# Record builders
# =============================================================================


def make_profile(**overrides: Any) -> DriverProfile:
    values: dict[str, Any] = {
        "id": uuid.uuid4(),
        "driver_type": "owner-operator",
        "license_class": "a",
        "years_exp": "5+",
        "license_state": "Texas",
        "zip_code": "75001",
        "about": "Reliable long-haul driver",
        "created_at": NOW - timedelta(days=30),
        "updated_at": NOW - timedelta(days=1),
    }
    values.update(overrides)
    return DriverProfile(**values)


def make_job(company_id: uuid.UUID | None, **overrides: Any) -> Job:
    values: dict[str, Any] = {
        "id": uuid.uuid4(),
        "company_id": company_id,
        "title": "OTR Tanker Driver",
        "description": "Haul liquid bulk across the south",
        "driver_type": "owner-operator",
        "route_type": "otr",
        "freight_type": "tanker",
        "team_driving": "Solo",
        "location": "Dallas, TX",
        "pay": "$0.70/mile",
        "status": "Active",
    }
    values.update(overrides)
    return Job(**values)


def make_application(company_id: uuid.UUID | None, **overrides: Any) -> Application:
    values: dict[str, Any] = {
        "id": uuid.uuid4(),
        "driver_id": uuid.uuid4(),
        "company_id": company_id,
        "first_name": "Sam",
        "last_name": "Rivera",
        "driver_type": "owner-operator",
        "license_class": "a",
        "years_exp": "3-5",
        "license_state": "Oklahoma",
        "solo_team": "solo",
        "endorse": {"tankVehicles": True},
        "hauler": {"tanker": True},
        "route": {"otr": True},
        "submitted_at": NOW - timedelta(days=2),
        "created_at": NOW - timedelta(days=2),
        "updated_at": NOW - timedelta(days=2),
    }
    values.update(overrides)
    return Application(**values)


def make_lead(company_id: uuid.UUID | None, **overrides: Any) -> Lead:
    values: dict[str, Any] = {
        "id": uuid.uuid4(),
        "company_id": company_id,
        "full_name": "Pat Lee",
        "state": "Texas",
        "years_exp": "1-3",
        "is_owner_op": True,
        "created_at": NOW - timedelta(days=10),
    }
    values.update(overrides)
    return Lead(**values)


def make_queue_item(
    entity_type: str,
    entity_id: uuid.UUID,
    *,
    company_id: uuid.UUID | None = None,
    status: str = STATUS_PENDING,
    attempts: int = 0,
    max_attempts: int = 3,
    scheduled_at: datetime | None = None,
    started_at: datetime | None = None,
    claim_token: uuid.UUID | None = None,
) -> RecomputeQueueItem:
    return RecomputeQueueItem(
        id=uuid.uuid4(),
        entity_type=entity_type,
        entity_id=entity_id,
        company_id=company_id,
        status=status,
        attempts=attempts,
        max_attempts=max_attempts,
        scheduled_at=scheduled_at or NOW - timedelta(minutes=1),
        started_at=started_at,
        claim_token=claim_token,
        completed_at=None,
        last_error=None,
        created_at=NOW - timedelta(minutes=5),
    )


# =============================================================================
# Fake store
# =============================================================================


class FakeMatchingStore:
    """Dict-backed MatchingStore.

    commit() snapshots the written state (embeddings, scores, queue rows) and
    rollback() restores it, so a failed unit leaves nothing behind.

    Attributes:
        fail_driver_ids: Driver ids whose driver-job upserts raise.
        fail_job_ids: Job ids whose company-candidate upserts raise.
    """

    def __init__(self) -> None:
        self.profiles: dict[uuid.UUID, DriverProfile] = {}
        self.jobs: dict[uuid.UUID, Job] = {}
        self.applications: dict[uuid.UUID, Application] = {}
        self.leads: dict[uuid.UUID, Lead] = {}
        self.embeddings: dict[tuple[str, uuid.UUID], StoredEmbedding] = {}
        self.driver_job_scores: dict[tuple[uuid.UUID, uuid.UUID], dict] = {}
        self.company_scores: dict[tuple, dict] = {}
        self.queue: dict[uuid.UUID, RecomputeQueueItem] = {}
        self.fail_driver_ids: set[uuid.UUID] = set()
        self.fail_job_ids: set[uuid.UUID] = set()
        self.commits = 0
        self.rollbacks = 0
        self.embedding_upserts = 0
        self._snapshot()

    # Seeding helpers
    def add(self, *records: Any) -> None:
        for record in records:
            if isinstance(record, DriverProfile):
                self.profiles[record.id] = record
            elif isinstance(record, Job):
                self.jobs[record.id] = record
            elif isinstance(record, Application):
                self.applications[record.id] = record
            elif isinstance(record, Lead):
                self.leads[record.id] = record
            elif isinstance(record, RecomputeQueueItem):
                self.queue[record.id] = record
            else:
                raise TypeError(f"Unsupported record: {record!r}")
        self._snapshot()

    # Inbound records
    async def get_driver_profile(self, driver_id):
        return self.profiles.get(driver_id)

    async def list_driver_profiles(self, updated_since=None):
        profiles = sorted(self.profiles.values(), key=lambda p: p.id)
        if updated_since is None:
            return profiles
        return [p for p in profiles if p.updated_at >= updated_since]

    async def get_latest_application_for_driver(self, driver_id):
        apps = [a for a in self.applications.values() if a.driver_id == driver_id]
        if not apps:
            return None
        return max(apps, key=lambda a: a.updated_at)

    async def get_job(self, job_id):
        return self.jobs.get(job_id)

    async def list_active_jobs(self, company_id=None):
        return sorted(
            (
                j
                for j in self.jobs.values()
                if j.status == "Active"
                and (company_id is None or j.company_id == company_id)
            ),
            key=lambda j: j.id,
        )

    async def get_application(self, application_id):
        return self.applications.get(application_id)

    async def list_company_applications(self, company_id):
        return sorted(
            (a for a in self.applications.values() if a.company_id == company_id),
            key=lambda a: a.id,
        )

    async def get_lead(self, lead_id):
        return self.leads.get(lead_id)

    async def list_company_leads(self, company_id):
        return sorted(
            (lead for lead in self.leads.values() if lead.company_id == company_id),
            key=lambda lead: lead.id,
        )

    # Embeddings
    async def get_embedding(self, entity_type, entity_id):
        return self.embeddings.get((entity_type, entity_id))

    async def upsert_embedding(
        self, entity_type, entity_id, *, content_hash, vector, provider, model
    ):
        self.embedding_upserts += 1
        self.embeddings[(entity_type, entity_id)] = StoredEmbedding(
            content_hash=content_hash, vector=vector, provider=provider, model=model
        )

    # Scores
    async def upsert_driver_job_scores(self, rows):
        for row in rows:
            if row["driver_id"] in self.fail_driver_ids:
                raise RuntimeError(f"write failed for driver {row['driver_id']}")
        for row in rows:
            self.driver_job_scores[(row["driver_id"], row["job_id"])] = row
        return len(rows)

    async def upsert_company_candidate_scores(self, rows):
        for row in rows:
            if row["job_id"] in self.fail_job_ids:
                raise RuntimeError(f"write failed for job {row['job_id']}")
        for row in rows:
            key = (
                row["company_id"],
                row["job_id"],
                row["candidate_source"],
                row["candidate_id"],
            )
            self.company_scores[key] = row
        return len(rows)

    # Recompute queue
    async def claim_queue_batch(self, batch_size, lease_seconds, now):
        cutoff = now - timedelta(seconds=lease_seconds)

        def expired(item):
            return (
                item.status == STATUS_PROCESSING
                and item.started_at is not None
                and item.started_at < cutoff
            )

        for item in self.queue.values():
            if expired(item) and item.attempts + 1 >= item.max_attempts:
                item.status = STATUS_ERROR
                item.attempts += 1
                item.completed_at = now
                item.claim_token = None
                item.last_error = lease_expired_error(lease_seconds)

        claimable = [
            item
            for item in self.queue.values()
            if (item.status == STATUS_PENDING and item.scheduled_at <= now)
            or expired(item)
        ]
        claimable.sort(key=lambda i: i.scheduled_at)
        claimed = claimable[:batch_size]
        for item in claimed:
            if item.status == STATUS_PROCESSING:
                item.attempts += 1
                item.last_error = lease_expired_error(lease_seconds)
            item.status = STATUS_PROCESSING
            item.started_at = now
            item.claim_token = uuid.uuid4()
        return claimed

    def _owned(self, item_id, claim_token):
        item = self.queue.get(item_id)
        if (
            item is None
            or item.status != STATUS_PROCESSING
            or item.claim_token != claim_token
        ):
            return None
        item.claim_token = None
        return item

    async def mark_queue_item_done(self, item_id, claim_token, now):
        item = self._owned(item_id, claim_token)
        if item is None:
            return 0
        item.status = STATUS_DONE
        item.completed_at = now
        return 1

    async def reschedule_queue_item(
        self, item_id, claim_token, *, attempts, scheduled_at, error
    ):
        item = self._owned(item_id, claim_token)
        if item is None:
            return 0
        item.status = STATUS_PENDING
        item.attempts = attempts
        item.scheduled_at = scheduled_at
        item.started_at = None
        item.last_error = error[:1000]
        return 1

    async def mark_queue_item_error(
        self, item_id, claim_token, *, attempts, error, now
    ):
        item = self._owned(item_id, claim_token)
        if item is None:
            return 0
        item.status = STATUS_ERROR
        item.attempts = attempts
        item.completed_at = now
        item.last_error = error[:1000]
        return 1

    async def release_queue_item(self, item_id, claim_token):
        item = self._owned(item_id, claim_token)
        if item is None:
            return 0
        item.status = STATUS_PENDING
        item.started_at = None
        return 1

    # Transactions
    def _snapshot(self) -> None:
        self._committed = (
            dict(self.embeddings),
            dict(self.driver_job_scores),
            dict(self.company_scores),
            {
                item_id: {field: getattr(item, field) for field in _QUEUE_FIELDS}
                for item_id, item in self.queue.items()
            },
        )

    async def commit(self):
        self.commits += 1
        self._snapshot()

    async def rollback(self):
        """Discard writes made since the last commit."""
        self.rollbacks += 1
        embeddings, driver_job_scores, company_scores, queue = self._committed
        self.embeddings = dict(embeddings)
        self.driver_job_scores = dict(driver_job_scores)
        self.company_scores = dict(company_scores)
        for item_id, fields in queue.items():
            for field, value in fields.items():
                setattr(self.queue[item_id], field, value)
