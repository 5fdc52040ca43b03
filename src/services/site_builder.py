"""Client for the external site generation engine."""

import base64
import binascii
import json
import logging
import mimetypes
from pathlib import Path
from typing import Any, Optional, Protocol

import httpx
from pydantic import BaseModel, Field, ValidationError

from src.config import Settings
from src.models.submission import FormSubmission
from src.utils.errors import SiteBuildAPIError, SiteBuildError

logger = logging.getLogger(__name__)


class SiteBuildResult(BaseModel):
    """Output of a successful site build."""

    site_urls: list[str] = Field(min_length=1)
    pdf_bytes: bytes
    cloud_resources: Any = Field(default_factory=dict)


class SiteBuilder(Protocol):
    """Builds a site from a validated submission."""

    async def build(self, submission: FormSubmission) -> SiteBuildResult:
        """Build the site, or raise on failure."""
        ...


class EngineResponse(BaseModel):
    """JSON body returned by the engine's build endpoint."""

    siteUrls: list[str] = Field(min_length=1)
    pdf: str = Field(min_length=1)
    cloudResources: Any = Field(default_factory=dict)


class HttpSiteBuilder:
    """Site builder that delegates to the generation engine over HTTP."""

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 600.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the HttpSiteBuilder.

        Args:
            base_url: Base URL of the generation engine
            api_key: Bearer token for the engine (optional)
            timeout: Timeout in seconds for a single build request
            client: Preconfigured HTTP client (a new one is created otherwise)
        """
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            return {}
        return {"Authorization": f"Bearer {self.api_key}"}

    def _logo_files(self, submission: FormSubmission) -> list[tuple[str, tuple[str, bytes, str]]]:
        """Read the uploaded logos into multipart file tuples."""
        files = []
        for raw_path in submission.logo_image_paths:
            path = Path(raw_path)
            try:
                data = path.read_bytes()
            except OSError as e:
                raise SiteBuildError(f"Cannot read logo image {path.name}: {e}")
            content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
            files.append(("logoImages", (path.name, data, content_type)))
        return files

    async def build(self, submission: FormSubmission) -> SiteBuildResult:
        """
        Ask the engine to build a site for the submission.

        Args:
            submission: Validated form submission

        Returns:
            Site URLs, PDF content and cloud resource metadata

        Raises:
            SiteBuildAPIError: If the engine responds with an error status
            SiteBuildError: If the request fails or the response is malformed
        """
        if not self.base_url:
            raise SiteBuildError("Site builder URL not configured")

        payload = submission.model_dump(mode="json", by_alias=True, exclude={"logo_image_paths"})
        files = self._logo_files(submission)

        try:
            response = await self._get_client().post(
                f"{self.base_url}/build",
                data={"payload": json.dumps(payload)},
                files=files or None,
                headers=self._headers(),
            )
        except httpx.HTTPError as e:
            raise SiteBuildError(f"Site builder request failed: {e}")

        if response.status_code >= 400:
            raise SiteBuildAPIError(response.status_code, response.text[:500])

        try:
            body = EngineResponse.model_validate(response.json())
            pdf_bytes = base64.b64decode(body.pdf, validate=True)
        except (ValueError, ValidationError, binascii.Error) as e:
            raise SiteBuildError(f"Malformed site builder response: {e}")

        logger.info(
            f"Site builder produced {len(body.siteUrls)} sites for "
            f"{submission.cloud_platform} ({len(pdf_bytes)} byte PDF)"
        )

        return SiteBuildResult(
            site_urls=body.siteUrls,
            pdf_bytes=pdf_bytes,
            cloud_resources=body.cloudResources,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def create_site_builder(settings: Settings) -> HttpSiteBuilder:
    """
    Create an HttpSiteBuilder using application settings.

    Args:
        settings: Application settings

    Returns:
        Configured HttpSiteBuilder instance
    """
    return HttpSiteBuilder(
        base_url=settings.site_builder_url,
        api_key=settings.site_builder_api_key,
        timeout=settings.site_builder_timeout_seconds,
    )
