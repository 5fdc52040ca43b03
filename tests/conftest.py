"""Pytest fixtures for site builder tests."""

import json
from pathlib import Path

import pytest
from mocks import FakeSiteBuilder, MockSupabaseClient

from src.config import Settings


@pytest.fixture
def valid_form_fields() -> dict:
    """Minimal valid site builder form, as submitted by the browser."""
    return {
        "keywords": json.dumps(["test keyword"]),
        "googleAccount": "test@example.com",
        "businessDescription": "This is a test business description",
        "youtubeVideos": json.dumps([]),
    }


@pytest.fixture
def supabase_client() -> MockSupabaseClient:
    """Fresh in-memory Supabase client."""
    return MockSupabaseClient()


@pytest.fixture
def site_builder() -> FakeSiteBuilder:
    """Site builder that always succeeds."""
    return FakeSiteBuilder()


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings that keep artifacts and uploads inside a temporary directory."""
    return Settings(
        supabase_url="",
        supabase_key="",
        artifact_backend="local",
        artifact_dir=str(tmp_path / "public" / "jobs"),
        upload_dir=str(tmp_path / "uploads"),
        site_builder_url="",
        log_level="INFO",
    )
