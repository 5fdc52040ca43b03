"""Job store backed by a Supabase table."""

import logging
from datetime import datetime
from typing import Any
from uuid import uuid4

from src.models.job import Job, check_update, utc_now
from src.utils.errors import JobNotFoundError, JobStoreError

logger = logging.getLogger(__name__)

# Columns callers may change through update()
UPDATABLE_COLUMNS = frozenset(
    {"status", "progress", "site_urls", "pdf_url", "cloud_resources", "error"}
)


def _row_to_job(row: dict[str, Any]) -> Job:
    """Convert a table row into a Job."""
    return Job(
        id=row["id"],
        status=row["status"],
        progress=row.get("progress") or 0,
        fields=row.get("fields") or {},
        site_urls=row.get("site_urls"),
        pdf_url=row.get("pdf_url"),
        cloud_resources=row.get("cloud_resources"),
        error=row.get("error"),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
    )


class JobStore:
    """
    Durable job records keyed by job id.

    Every write is a single-row update statement, so concurrent readers see
    either the previous or the next version of a job, never a mix. Each job has
    one writer at a time: the background task that owns it.
    """

    def __init__(self, supabase_client: Any, table: str = "jobs") -> None:
        """
        Initialize the JobStore.

        Args:
            supabase_client: Supabase client instance
            table: Name of the jobs table
        """
        self.supabase = supabase_client
        self.table = table

    async def create(self, fields: dict[str, Any]) -> Job:
        """
        Create a pending job.

        Args:
            fields: Snapshot of the validated submission

        Returns:
            The created Job

        Raises:
            JobStoreError: If the insert fails
        """
        now = utc_now()
        job = Job(
            id=str(uuid4()),
            status="pending",
            progress=0,
            fields=fields,
            created_at=now,
            updated_at=now,
        )

        try:
            result = (
                self.supabase.table(self.table)
                .insert(job.model_dump(mode="json"))
                .execute()
            )
        except Exception as e:
            raise JobStoreError(f"Failed to create job: {e}")

        if not result.data:
            raise JobStoreError("Failed to insert job into database")

        logger.info(f"Created job {job.id}")
        return job

    async def get(self, job_id: str) -> Job:
        """
        Retrieve a job by ID.

        Args:
            job_id: The job ID to retrieve

        Returns:
            The stored Job

        Raises:
            JobNotFoundError: If no job has this id
            JobStoreError: If the lookup fails
        """
        try:
            result = self.supabase.table(self.table).select("*").eq("id", job_id).execute()
        except Exception as e:
            raise JobStoreError(f"Failed to get job {job_id}: {e}")

        if not result.data:
            raise JobNotFoundError(job_id)

        return _row_to_job(result.data[0])

    async def update(self, job_id: str, **changes: Any) -> Job:
        """
        Merge status, progress, result or error changes into a job.

        Args:
            job_id: The job ID to update
            **changes: Column values to write

        Returns:
            The updated Job

        Raises:
            JobNotFoundError: If no job has this id
            InvalidJobTransitionError: If the change breaks the job lifecycle
            JobStoreError: If the write fails
        """
        unknown = set(changes) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update job columns: {', '.join(sorted(unknown))}")

        current = await self.get(job_id)
        check_update(current, changes)

        updated = current.model_copy(update={**changes, "updated_at": utc_now()})
        update_data = updated.model_dump(mode="json", include=set(changes) | {"updated_at"})

        try:
            result = (
                self.supabase.table(self.table).update(update_data).eq("id", job_id).execute()
            )
        except Exception as e:
            raise JobStoreError(f"Failed to update job {job_id}: {e}")

        if not result.data:
            raise JobStoreError(f"Failed to update job {job_id}")

        logger.info(f"Job {job_id} -> {updated.status} ({updated.progress}%)")
        return updated
