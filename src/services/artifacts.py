"""Storage for generated job artifacts (PDF reports)."""

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional, Protocol

from src.config import Settings
from src.utils.errors import ArtifactStorageError

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


def artifact_name(job_id: str) -> str:
    """File name of the PDF generated for a job."""
    return f"{job_id}.pdf"


class ArtifactStore(Protocol):
    """Blob store for generated PDFs."""

    async def save_pdf(self, job_id: str, pdf_bytes: bytes) -> str:
        """Persist the PDF for a job and return its public reference."""
        ...


class LocalArtifactStore:
    """Writes PDFs to a local directory served under a fixed URL prefix."""

    def __init__(self, directory: str | Path, url_prefix: str = "/jobs") -> None:
        """
        Initialize the LocalArtifactStore.

        Args:
            directory: Directory the PDFs are written to
            url_prefix: Public path the directory is mounted at
        """
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

    async def save_pdf(self, job_id: str, pdf_bytes: bytes) -> str:
        """
        Write the PDF for a job.

        Args:
            job_id: Job the PDF belongs to
            pdf_bytes: PDF content

        Returns:
            Public path of the PDF, e.g. ``/jobs/<job_id>.pdf``

        Raises:
            ArtifactStorageError: If the file cannot be written
        """
        name = artifact_name(job_id)
        path = self.directory / name

        try:
            await asyncio.to_thread(self._write, path, pdf_bytes)
        except OSError as e:
            raise ArtifactStorageError(f"Failed to write PDF for job {job_id}: {e}")

        logger.info(f"Saved PDF for job {job_id}: {path} ({len(pdf_bytes)} bytes)")
        return f"{self.url_prefix}/{name}"


class SupabaseArtifactStore:
    """Uploads PDFs to a Supabase storage bucket."""

    def __init__(self, supabase_client: Any, bucket: str = "jobs") -> None:
        """
        Initialize the SupabaseArtifactStore.

        Args:
            supabase_client: Supabase client instance
            bucket: Storage bucket name
        """
        self.supabase = supabase_client
        self.bucket = bucket

    async def save_pdf(self, job_id: str, pdf_bytes: bytes) -> str:
        """
        Upload the PDF for a job.

        Args:
            job_id: Job the PDF belongs to
            pdf_bytes: PDF content

        Returns:
            Public URL of the uploaded file

        Raises:
            ArtifactStorageError: If upload fails
        """
        file_path = artifact_name(job_id)

        try:
            self.supabase.storage.from_(self.bucket).upload(
                path=file_path,
                file=pdf_bytes,
                file_options={"content-type": PDF_CONTENT_TYPE, "upsert": "true"},
            )
            public_url = self.supabase.storage.from_(self.bucket).get_public_url(file_path)
        except Exception as e:
            raise ArtifactStorageError(f"Failed to upload PDF for job {job_id}: {e}")

        logger.info(f"Uploaded PDF for job {job_id} to {self.bucket}/{file_path}")
        return public_url


def create_artifact_store(
    settings: Settings, supabase_client: Optional[Any] = None
) -> ArtifactStore:
    """
    Create the configured artifact store.

    Args:
        settings: Application settings
        supabase_client: Client used when the supabase backend is selected

    Returns:
        An ArtifactStore instance
    """
    if settings.artifact_backend == "supabase":
        if supabase_client is None:
            raise ValueError("A Supabase client is required for the supabase artifact backend")
        return SupabaseArtifactStore(supabase_client, bucket=settings.artifact_bucket)
    return LocalArtifactStore(settings.artifact_dir)
