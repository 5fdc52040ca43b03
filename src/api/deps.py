"""FastAPI dependencies for the site builder API."""

from dataclasses import dataclass
from typing import Any, Optional

from fastapi import Request

from src.config import Settings, get_settings
from src.services.artifacts import ArtifactStore, create_artifact_store
from src.services.job_store import JobStore
from src.services.orchestrator import JobOrchestrator
from src.services.site_builder import SiteBuilder, create_site_builder
from src.services.sites import SiteRegistry
from src.services.status import StatusQueryService


@dataclass
class Services:
    """Process-wide service handles, opened at startup and shared by requests."""

    settings: Settings
    job_store: JobStore
    artifact_store: ArtifactStore
    site_builder: SiteBuilder
    orchestrator: JobOrchestrator
    status: StatusQueryService
    sites: SiteRegistry

    async def aclose(self) -> None:
        """Release resources held by the services."""
        aclose = getattr(self.site_builder, "aclose", None)
        if aclose is not None:
            await aclose()


def build_services(
    settings: Settings,
    supabase_client: Any,
    artifact_store: Optional[ArtifactStore] = None,
    site_builder: Optional[SiteBuilder] = None,
) -> Services:
    """
    Wire the services around one shared Supabase client.

    Args:
        settings: Application settings
        supabase_client: Client shared by the job store and site registry
        artifact_store: Artifact store override (configured backend otherwise)
        site_builder: Site builder override (HTTP engine client otherwise)

    Returns:
        A Services container
    """
    job_store = JobStore(supabase_client, table=settings.jobs_table)
    artifact_store = artifact_store or create_artifact_store(settings, supabase_client)
    site_builder = site_builder or create_site_builder(settings)

    return Services(
        settings=settings,
        job_store=job_store,
        artifact_store=artifact_store,
        site_builder=site_builder,
        orchestrator=JobOrchestrator(job_store, artifact_store, site_builder),
        status=StatusQueryService(job_store),
        sites=SiteRegistry(supabase_client, table=settings.sites_table),
    )


def create_services() -> Services:
    """Open the Supabase client and build the services from application settings."""
    from supabase import create_client

    settings = get_settings()
    supabase_client = create_client(settings.supabase_url, settings.supabase_key)
    return build_services(settings, supabase_client)


def get_services(request: Request) -> Services:
    """Dependency for the shared services container."""
    return request.app.state.services
