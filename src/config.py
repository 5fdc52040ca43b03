"""Application settings from environment variables."""

from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic_settings import BaseSettings

# Load environment variables
load_dotenv()


class Settings(BaseSettings):
    """Application settings from environment."""

    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    jobs_table: str = "jobs"
    sites_table: str = "sites"

    # Generated artifacts
    artifact_backend: Literal["local", "supabase"] = "local"
    artifact_dir: str = "public/jobs"
    artifact_bucket: str = "jobs"

    # Uploads
    upload_dir: str = "tmp/uploads"
    max_logo_images: int = 8
    max_logo_size_bytes: int = 10 * 1024 * 1024

    # Site generation engine
    site_builder_url: str = ""
    site_builder_api_key: str = ""
    site_builder_timeout_seconds: float = 600.0

    # Configuration
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]

    model_config = {"env_file": ".env"}


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
