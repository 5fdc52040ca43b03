"""Job orchestration: accept submissions and drive site builds to completion."""

import logging
from pathlib import Path

from src.models.job import Job
from src.models.submission import FormSubmission
from src.services.artifacts import ArtifactStore
from src.services.job_store import JobStore
from src.services.site_builder import SiteBuilder

logger = logging.getLogger(__name__)

# Progress reported once a build has been picked up
STARTED_PROGRESS = 10
FINISHED_PROGRESS = 100

UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"


class JobOrchestrator:
    """
    Owns the lifecycle of site build jobs.

    ``submit`` records a pending job and returns at once. ``run_job`` is meant
    to be scheduled in the background; it moves the job through in_progress to
    complete or error and never raises to its caller.
    """

    def __init__(
        self,
        job_store: JobStore,
        artifact_store: ArtifactStore,
        site_builder: SiteBuilder,
    ) -> None:
        """
        Initialize the JobOrchestrator.

        Args:
            job_store: Durable job records
            artifact_store: Destination for generated PDFs
            site_builder: External site generation collaborator
        """
        self.job_store = job_store
        self.artifact_store = artifact_store
        self.site_builder = site_builder

    async def submit(self, submission: FormSubmission) -> Job:
        """
        Create a pending job for a validated submission.

        Args:
            submission: Validated form submission

        Returns:
            The created pending Job

        Raises:
            JobStoreError: If the job cannot be recorded
        """
        job = await self.job_store.create(submission.snapshot())
        logger.info(f"Accepted job {job.id} for {len(submission.keywords)} keywords")
        return job

    async def run_job(self, job_id: str, submission: FormSubmission) -> None:
        """
        Build the site for a job and record the outcome.

        Any failure, from the collaborator or from storage, ends the job in
        the error state. Nothing is retried.

        Args:
            job_id: Job to drive
            submission: Validated form submission for the job
        """
        try:
            await self.job_store.update(job_id, status="in_progress", progress=STARTED_PROGRESS)

            result = await self.site_builder.build(submission)
            pdf_url = await self.artifact_store.save_pdf(job_id, result.pdf_bytes)

            await self.job_store.update(
                job_id,
                status="complete",
                progress=FINISHED_PROGRESS,
                site_urls=list(result.site_urls),
                pdf_url=pdf_url,
                cloud_resources=(
                    result.cloud_resources if result.cloud_resources is not None else {}
                ),
            )
            logger.info(f"Job {job_id} complete: {len(result.site_urls)} sites")

        except Exception as e:
            logger.error(f"Job {job_id} failed: {e}")
            await self._mark_failed(job_id, str(e) or UNKNOWN_ERROR_MESSAGE)

        finally:
            self._discard_uploads(submission)

    async def _mark_failed(self, job_id: str, message: str) -> None:
        """Record a failure; if even that fails the job stays where it is."""
        try:
            await self.job_store.update(
                job_id, status="error", progress=FINISHED_PROGRESS, error=message
            )
        except Exception:
            logger.exception(f"Could not record failure for job {job_id}; job left unfinished")

    def _discard_uploads(self, submission: FormSubmission) -> None:
        """Remove temporary logo uploads once the build no longer needs them."""
        for raw_path in submission.logo_image_paths:
            try:
                Path(raw_path).unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Failed to remove upload {raw_path}: {e}")
