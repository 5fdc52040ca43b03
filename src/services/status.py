"""Read-only job status lookups for polling clients."""

from src.models.job import JobStatusView
from src.services.job_store import JobStore


class StatusQueryService:
    """Projects stored jobs into client-facing status views."""

    def __init__(self, job_store: JobStore) -> None:
        self.job_store = job_store

    async def get(self, job_id: str) -> JobStatusView:
        """
        Get the current status of a job.

        Raises:
            JobNotFoundError: If no job has this id
            JobStoreError: If the lookup fails
        """
        job = await self.job_store.get(job_id)
        return JobStatusView.from_job(job)
