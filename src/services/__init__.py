"""Service layer for the site builder."""

from src.services.artifacts import (
    ArtifactStore,
    LocalArtifactStore,
    SupabaseArtifactStore,
    create_artifact_store,
)
from src.services.job_store import JobStore
from src.services.orchestrator import JobOrchestrator
from src.services.site_builder import (
    HttpSiteBuilder,
    SiteBuilder,
    SiteBuildResult,
    create_site_builder,
)
from src.services.sites import SiteRegistry
from src.services.status import StatusQueryService
from src.services.validator import validate_form

__all__ = [
    "ArtifactStore",
    "LocalArtifactStore",
    "SupabaseArtifactStore",
    "create_artifact_store",
    "JobStore",
    "JobOrchestrator",
    "HttpSiteBuilder",
    "SiteBuilder",
    "SiteBuildResult",
    "create_site_builder",
    "SiteRegistry",
    "StatusQueryService",
    "validate_form",
]
