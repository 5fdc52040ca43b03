"""Registry of externally managed sites (WordPress installs)."""

import logging
from datetime import datetime
from typing import Any, List
from uuid import uuid4

from src.models.job import utc_now
from src.models.site import Site
from src.utils.errors import SiteRegistryError

logger = logging.getLogger(__name__)


class SiteRegistry:
    """Service for Supabase-backed site records."""

    def __init__(self, supabase_client: Any, table: str = "sites") -> None:
        self.supabase = supabase_client
        self.table = table

    async def list_wordpress_sites(self) -> List[Site]:
        """
        List WordPress sites, newest first.

        Raises:
            SiteRegistryError: If the query fails
        """
        try:
            result = (
                self.supabase.table(self.table)
                .select("*")
                .eq("platform", "wordpress")
                .order("created_at", desc=True)
                .execute()
            )
        except Exception as e:
            raise SiteRegistryError(f"Failed to list WordPress sites: {e}")

        return [
            Site(
                id=row["id"],
                url=row["url"],
                platform=row["platform"],
                credentials=row.get("credentials"),
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in result.data or []
        ]

    async def add_wordpress_site(self, url: str, credentials: Any) -> Site:
        """
        Register a WordPress site.

        Args:
            url: Site URL
            credentials: Opaque credentials used to manage the site

        Returns:
            The created Site

        Raises:
            SiteRegistryError: If the insert fails
        """
        site = Site(
            id=str(uuid4()),
            url=url,
            platform="wordpress",
            credentials=credentials,
            created_at=utc_now(),
        )

        try:
            result = self.supabase.table(self.table).insert(site.model_dump(mode="json")).execute()
        except Exception as e:
            raise SiteRegistryError(f"Failed to add WordPress site: {e}")

        if not result.data:
            raise SiteRegistryError("Failed to insert site into database")

        logger.info(f"New WordPress site added: {site.url}")
        return site
