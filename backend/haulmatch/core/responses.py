"""Response models for the operational endpoints.

Run summaries are returned bare (no data envelope) because schedulers and
dashboards read the counts directly. Errors use the {"error": {...}}
envelope.
"""

from pydantic import BaseModel, ConfigDict, Field


class RecomputeSummary(BaseModel):
    """Counts from one recompute queue batch."""

    processed: int
    succeeded: int
    failed: int
    skipped: int


class BackfillSummary(BaseModel):
    """Counts from one backfill run, camelCase on the wire."""

    model_config = ConfigDict(populate_by_name=True)

    driver_job_pairs: int = Field(alias="driverJobPairs")
    company_candidate_pairs: int = Field(alias="companyCandidatePairs")
    failed_units: int = Field(alias="failedUnits")
    elapsed_ms: int = Field(alias="elapsedMs")
    complete: bool


class ErrorDetail(BaseModel):
    """Error body.

    Attributes:
        code: Machine-readable error code (e.g., "FORBIDDEN").
        message: Human-readable error message.
        details: Field-level errors, only for VALIDATION_ERROR.
    """

    code: str
    message: str
    details: list[dict] | None = None


class ErrorResponse(BaseModel):
    error: ErrorDetail
