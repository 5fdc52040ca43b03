"""FastAPI routes for the site builder API."""

import logging
from pathlib import Path
from typing import Any, List, Tuple
from uuid import UUID, uuid4

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.datastructures import FormData, UploadFile

from src.api.deps import Services, get_services
from src.config import Settings
from src.models.submission import FormSubmission
from src.services.validator import validate_form
from src.utils.errors import (
    FormValidationError,
    InvalidFormatError,
    JobNotFoundError,
    SiteRegistryError,
)

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix="/api")

ACCEPTED_MESSAGE = "Job accepted. Site is being created."

# Methods answered with 405, per endpoint
SITE_BUILDER_REJECTED_METHODS = ["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"]
JOB_STATUS_REJECTED_METHODS = ["HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
SITES_REJECTED_METHODS = ["HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"]


# ==================== Responses ====================


def _site_builder_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    """Response body used by the submission endpoint."""
    return JSONResponse(
        status_code=status_code,
        content={"success": 200 <= status_code < 300, "message": message, **extra},
    )


def _job_error(status_code: int, error: str) -> JSONResponse:
    """Error body used by the job status endpoint."""
    return JSONResponse(status_code=status_code, content={"error": error})


# ==================== Uploads ====================


def _is_logo_field(name: str) -> bool:
    return name == "logoImages" or name.startswith("logoImage-")


def _split_form(form: FormData) -> Tuple[dict[str, str], List[UploadFile]]:
    """Separate text fields from logo uploads; the first value of a repeated field wins."""
    fields: dict[str, str] = {}
    uploads: List[UploadFile] = []
    for name, value in form.multi_items():
        if isinstance(value, UploadFile):
            if _is_logo_field(name) and value.filename:
                uploads.append(value)
        else:
            fields.setdefault(name, value)
    return fields, uploads


def _check_logo_size(upload: UploadFile, size: int, settings: Settings) -> None:
    if size > settings.max_logo_size_bytes:
        raise InvalidFormatError(f"Logo image {upload.filename} is too large", field="logoImages")


async def _save_uploads(uploads: List[UploadFile], settings: Settings) -> List[str]:
    """
    Check and store logo uploads in the temporary upload directory.

    Raises:
        InvalidFormatError: If there are too many files or one is too large
    """
    if len(uploads) > settings.max_logo_images:
        raise InvalidFormatError(
            f"Too many logo images (maximum {settings.max_logo_images})", field="logoImages"
        )

    contents = []
    for upload in uploads:
        # Declared sizes are checked before anything is buffered
        if upload.size is not None:
            _check_logo_size(upload, upload.size, settings)
        data = await upload.read()
        _check_logo_size(upload, len(data), settings)
        contents.append((upload.filename or "", data))

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)

    paths: List[str] = []
    for filename, data in contents:
        path = upload_dir / f"{uuid4().hex}{Path(filename).suffix.lower()}"
        path.write_bytes(data)
        paths.append(str(path))
    return paths


def _remove_files(paths: List[str]) -> None:
    for raw_path in paths:
        Path(raw_path).unlink(missing_ok=True)


# ==================== Site Builder ====================


@router.post("/site-builder")
async def submit_site_builder(
    request: Request,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
) -> JSONResponse:
    """
    Accept a site builder form and start a background build.

    Returns 202 with a job id right away; clients poll /api/jobs/{job_id}
    for the outcome.
    """
    saved_paths: List[str] = []

    try:
        form = await request.form()
        fields, uploads = _split_form(form)

        submission: FormSubmission = validate_form(fields)
        saved_paths = await _save_uploads(uploads, services.settings)
        submission = submission.model_copy(update={"logo_image_paths": saved_paths})

        job = await services.orchestrator.submit(submission)

    except FormValidationError as e:
        _remove_files(saved_paths)
        logger.info(f"Rejected site builder submission: {e.message}")
        return _site_builder_response(400, e.message)

    except Exception as e:
        _remove_files(saved_paths)
        logger.exception(f"Error processing site builder request: {e}")
        return _site_builder_response(500, str(e) or "An unknown error occurred")

    # Runs after the response has been sent
    background_tasks.add_task(services.orchestrator.run_job, job.id, submission)

    return _site_builder_response(202, ACCEPTED_MESSAGE, jobId=job.id)


@router.api_route(
    "/site-builder", methods=SITE_BUILDER_REJECTED_METHODS, include_in_schema=False
)
async def site_builder_method_not_allowed() -> JSONResponse:
    """Reject anything but POST."""
    return _site_builder_response(405, "Method not allowed")


# ==================== Job Status ====================


@router.get("/jobs/{job_id}")
async def get_job_status(
    job_id: str,
    services: Services = Depends(get_services),
) -> JSONResponse:
    """
    Get the current status of a site build job.

    Site URLs and the PDF URL are included only once the job is complete;
    ``message`` carries the failure text for jobs in the error state.
    """
    try:
        UUID(job_id)
    except ValueError:
        return _job_error(400, "Invalid job ID")

    try:
        view = await services.status.get(job_id)
    except JobNotFoundError:
        return _job_error(404, "Job not found")
    except Exception as e:
        logger.exception(f"Error fetching job status: {e}")
        return _job_error(500, "Internal server error")

    return JSONResponse(
        status_code=200,
        content=view.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@router.get("/jobs", include_in_schema=False)
@router.get("/jobs/", include_in_schema=False)
async def get_job_status_without_id() -> JSONResponse:
    """A status lookup needs a job id."""
    return _job_error(400, "Invalid job ID")


@router.api_route(
    "/jobs/{job_id}", methods=JOB_STATUS_REJECTED_METHODS, include_in_schema=False
)
async def job_status_method_not_allowed(job_id: str) -> JSONResponse:
    """Reject anything but GET."""
    return _job_error(405, "Method not allowed")


# ==================== WordPress Sites ====================


@router.get("/admin/wp/sites")
async def list_wordpress_sites(services: Services = Depends(get_services)) -> JSONResponse:
    """List registered WordPress sites, newest first."""
    try:
        sites = await services.sites.list_wordpress_sites()
    except SiteRegistryError as e:
        logger.error(f"Error fetching WordPress sites: {e}")
        return JSONResponse(status_code=500, content={"message": "Internal server error"})

    return JSONResponse(
        status_code=200,
        content=[site.model_dump(mode="json", by_alias=True) for site in sites],
    )


@router.post("/admin/wp/sites")
async def add_wordpress_site(
    request: Request,
    services: Services = Depends(get_services),
) -> JSONResponse:
    """Register a WordPress site from ``{url, credentials}``."""
    try:
        body = await request.json()
    except ValueError:
        body = None

    url = str(body.get("url") or "").strip() if isinstance(body, dict) else ""
    if not url or not body.get("credentials"):
        return JSONResponse(status_code=400, content={"message": "Missing url or credentials"})

    try:
        site = await services.sites.add_wordpress_site(url, body["credentials"])
    except SiteRegistryError as e:
        logger.error(f"Error adding new WordPress site: {e}")
        return JSONResponse(status_code=500, content={"message": "Internal server error"})

    return JSONResponse(status_code=201, content=site.model_dump(mode="json", by_alias=True))


@router.api_route(
    "/admin/wp/sites", methods=SITES_REJECTED_METHODS, include_in_schema=False
)
async def wordpress_sites_method_not_allowed(request: Request) -> PlainTextResponse:
    """Reject anything but GET and POST."""
    return PlainTextResponse(
        f"Method {request.method} Not Allowed",
        status_code=405,
        headers={"Allow": "GET, POST"},
    )
