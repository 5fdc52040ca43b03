"""Job Pydantic models and lifecycle rules."""

from datetime import datetime, timezone
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.utils.errors import InvalidJobTransitionError

JobState = Literal["pending", "in_progress", "complete", "error"]

TERMINAL_STATES: frozenset[str] = frozenset({"complete", "error"})

# Status moves a job may make; a same-status update only advances progress.
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"pending", "in_progress"}),
    "in_progress": frozenset({"in_progress", "complete", "error"}),
    "complete": frozenset(),
    "error": frozenset(),
}

RESULT_FIELDS = ("site_urls", "pdf_url", "cloud_resources")


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Job(BaseModel):
    """Persisted record tracking one site-build request."""

    id: str = Field(min_length=1)
    status: JobState = "pending"
    progress: int = Field(default=0, ge=0, le=100)
    fields: dict[str, Any] = Field(default_factory=dict)
    site_urls: Optional[list[str]] = None
    pdf_url: Optional[str] = None
    cloud_resources: Optional[Any] = None
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_terminal(self) -> bool:
        """Whether the job has reached complete or error."""
        return self.status in TERMINAL_STATES


class JobStatusView(BaseModel):
    """Client-facing projection of a job, as returned to polling clients."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(serialization_alias="jobId")
    status: JobState
    progress: int
    message: str = ""
    urls: Optional[list[str]] = None
    pdf_url: Optional[str] = Field(default=None, serialization_alias="pdfUrl")

    @classmethod
    def from_job(cls, job: Job) -> "JobStatusView":
        """Project a stored job; result fields are exposed only once complete."""
        complete = job.status == "complete"
        return cls(
            job_id=job.id,
            status=job.status,
            progress=job.progress,
            message=job.error or "",
            urls=job.site_urls if complete else None,
            pdf_url=job.pdf_url if complete else None,
        )


def check_update(job: Job, changes: Mapping[str, Any]) -> None:
    """
    Verify that applying ``changes`` to ``job`` respects the job lifecycle.

    Args:
        job: Current stored state of the job
        changes: Columns about to be written

    Raises:
        InvalidJobTransitionError: If the update is not allowed
    """
    if job.is_terminal:
        raise InvalidJobTransitionError(f"Job {job.id} is already {job.status}")

    new_status = changes.get("status", job.status)

    if new_status not in ALLOWED_TRANSITIONS[job.status]:
        raise InvalidJobTransitionError(
            f"Job {job.id} cannot move from {job.status} to {new_status}"
        )

    if "progress" in changes:
        progress = changes["progress"]
        if not isinstance(progress, int) or not 0 <= progress <= 100:
            raise InvalidJobTransitionError(f"Job {job.id} progress out of range: {progress}")
        if progress < job.progress:
            raise InvalidJobTransitionError(
                f"Job {job.id} progress cannot decrease from {job.progress} to {progress}"
            )

    has_results = any(changes.get(name) is not None for name in RESULT_FIELDS)
    has_error = changes.get("error") is not None

    if has_results and has_error:
        raise InvalidJobTransitionError(f"Job {job.id} cannot carry both results and an error")

    if new_status == "complete":
        missing = [name for name in RESULT_FIELDS if changes.get(name) is None]
        if missing:
            raise InvalidJobTransitionError(
                f"Job {job.id} cannot complete without {', '.join(missing)}"
            )
    elif has_results:
        raise InvalidJobTransitionError(f"Job {job.id} results are only set on completion")

    if new_status == "error":
        if not has_error:
            raise InvalidJobTransitionError(f"Job {job.id} cannot fail without a message")
    elif has_error:
        raise InvalidJobTransitionError(f"Job {job.id} error is only set on failure")
