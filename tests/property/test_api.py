"""Tests for the site builder HTTP API.

Feature: site-builder
Properties 16, 17, 18: Submission, Polling and Error Responses
"""

import asyncio
import io
import json
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from hypothesis import given, settings, strategies as st
from mocks import FailingSiteBuilder, FakeSiteBuilder, MockSupabaseClient
from starlette.datastructures import UploadFile

from src.api.deps import build_services
from src.api.routes import _save_uploads
from src.config import Settings
from src.main import create_app
from src.utils.errors import InvalidFormatError, JobStoreError, SiteBuildError


def make_client(settings_: Settings, supabase_client, site_builder) -> TestClient:
    services = build_services(settings_, supabase_client, site_builder=site_builder)
    return TestClient(create_app(services))


@pytest.fixture
def client(test_settings, supabase_client, site_builder) -> TestClient:
    return make_client(test_settings, supabase_client, site_builder)


class TestProperty16Submission:
    """Property 16: Submission.

    A structurally valid form SHALL be accepted with 202 and a job id; an
    invalid one SHALL be rejected with 400 and no job SHALL be created.
    """

    def test_minimal_valid_submission_accepted(self, client, valid_form_fields) -> None:
        response = client.post("/api/site-builder", data=valid_form_fields)

        assert response.status_code == 202
        body = response.json()
        assert body["success"] is True
        assert body["message"].startswith("Job accepted")
        assert body["jobId"]

    @pytest.mark.parametrize(
        "overrides,expected",
        [
            ({"keywords": json.dumps([])}, "keyword is required"),
            ({"keywords": "not-valid-json"}, "Invalid keywords format"),
            ({"googleAccount": "invalid-email"}, "Invalid email format"),
            ({"businessDescription": ""}, "Business description is required"),
            ({"businessUrl": "invalid-url"}, "Invalid business URL format"),
            (
                {"googleBusinessProfileUrl": "invalid-url"},
                "Invalid Google Business Profile URL format",
            ),
            ({"youtubeVideos": json.dumps(["invalid-youtube-url"])}, "Invalid YouTube URL"),
            ({"generateAuthorBio": "true", "authorName": " "}, "Author name is required"),
            ({"pbnSettings": json.dumps({"enabled": True})}, "Invalid pbnSettings format"),
            ({"keywords": "[" * 100000}, "Invalid keywords format"),
            ({"siloStructure": "[" * 100000}, "Invalid siloStructure format"),
        ],
    )
    def test_invalid_submission_rejected(
        self, client, supabase_client, valid_form_fields, overrides, expected
    ) -> None:
        response = client.post("/api/site-builder", data={**valid_form_fields, **overrides})

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert expected in body["message"]
        assert supabase_client.get_all_records("jobs") == []

    @pytest.mark.parametrize("method", ["GET", "PUT", "PATCH", "DELETE", "OPTIONS"])
    def test_non_post_rejected(self, client, method: str) -> None:
        response = client.request(method, "/api/site-builder")

        assert response.status_code == 405
        assert response.json() == {"success": False, "message": "Method not allowed"}

    def test_head_rejected(self, client) -> None:
        response = client.head("/api/site-builder")

        assert response.status_code == 405
        assert response.headers["content-type"] == "application/json"

    def test_store_failure_before_job_creation(
        self, test_settings, site_builder, valid_form_fields
    ) -> None:
        broken = MagicMock()
        broken.table.return_value.insert.return_value.execute.side_effect = RuntimeError(
            "connection refused"
        )
        client = make_client(test_settings, broken, site_builder)

        response = client.post("/api/site-builder", data=valid_form_fields)

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert "connection refused" in body["message"]

    def test_logo_uploads_passed_to_builder(
        self, client, site_builder, valid_form_fields, test_settings
    ) -> None:
        files = [
            ("logoImages", ("logo.png", b"\x89PNG first", "image/png")),
            ("logoImage-1", ("mark.jpg", b"\xff\xd8 second", "image/jpeg")),
        ]

        response = client.post("/api/site-builder", data=valid_form_fields, files=files)

        assert response.status_code == 202
        paths = site_builder.calls[0].logo_image_paths
        assert len(paths) == 2
        assert all(p.startswith(test_settings.upload_dir) for p in paths)
        assert [p.rsplit(".", 1)[-1] for p in paths] == ["png", "jpg"]

    def test_too_many_logos_rejected(self, client, supabase_client, valid_form_fields) -> None:
        files = [
            ("logoImages", (f"logo{i}.png", b"\x89PNG", "image/png")) for i in range(9)
        ]

        response = client.post("/api/site-builder", data=valid_form_fields, files=files)

        assert response.status_code == 400
        assert "Too many logo images" in response.json()["message"]
        assert supabase_client.get_all_records("jobs") == []

    def test_oversized_logo_rejected(
        self, test_settings, supabase_client, site_builder, valid_form_fields
    ) -> None:
        small = test_settings.model_copy(update={"max_logo_size_bytes": 4})
        client = make_client(small, supabase_client, site_builder)
        files = [("logoImages", ("logo.png", b"\x89PNG too big", "image/png"))]

        response = client.post("/api/site-builder", data=valid_form_fields, files=files)

        assert response.status_code == 400
        assert "too large" in response.json()["message"]

    def test_declared_oversize_rejected_before_reading(self, test_settings) -> None:
        small = test_settings.model_copy(update={"max_logo_size_bytes": 4})
        upload = UploadFile(file=io.BytesIO(b"\x89PNG too big"), size=12, filename="logo.png")

        with pytest.raises(InvalidFormatError, match="too large"):
            asyncio.run(_save_uploads([upload], small))

        assert upload.file.tell() == 0


class TestProperty17Polling:
    """Property 17: Polling.

    A job accepted through the API SHALL be observable by id until it reaches
    a terminal state; unknown ids SHALL never yield a default job.
    """

    def test_accepted_job_completes(self, client, valid_form_fields) -> None:
        job_id = client.post("/api/site-builder", data=valid_form_fields).json()["jobId"]

        response = client.get(f"/api/jobs/{job_id}")

        assert response.status_code == 200
        body = response.json()
        assert body["jobId"] == job_id
        assert body["status"] == "complete"
        assert body["progress"] == 100
        assert body["message"] == ""
        assert body["urls"]
        assert body["pdfUrl"] == f"/jobs/{job_id}.pdf"

    def test_pdf_published_at_job_path(self, client, site_builder, valid_form_fields) -> None:
        job_id = client.post("/api/site-builder", data=valid_form_fields).json()["jobId"]

        response = client.get(f"/jobs/{job_id}.pdf")

        assert response.status_code == 200
        assert response.content == site_builder.pdf_bytes

    def test_failed_build_reported_through_status(
        self, test_settings, supabase_client, valid_form_fields
    ) -> None:
        builder = FailingSiteBuilder(SiteBuildError("Google API quota exceeded"))
        client = make_client(test_settings, supabase_client, builder)

        submit = client.post("/api/site-builder", data=valid_form_fields)
        assert submit.status_code == 202

        body = client.get(f"/api/jobs/{submit.json()['jobId']}").json()
        assert body["status"] == "error"
        assert body["progress"] == 100
        assert body["message"] == "Google API quota exceeded"
        assert "urls" not in body
        assert "pdfUrl" not in body

    def test_pending_job_view(self, client, supabase_client) -> None:
        services = client.app.state.services
        job = asyncio.run(services.job_store.create({"keywords": ["a"]}))

        body = client.get(f"/api/jobs/{job.id}").json()
        assert body == {"jobId": job.id, "status": "pending", "progress": 0, "message": ""}

    @settings(max_examples=25, deadline=None)
    @given(job_id=st.uuids().map(str))
    def test_unknown_job_not_found(self, job_id: str) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            client = make_client(
                Settings(artifact_dir=tmp, upload_dir=tmp), MockSupabaseClient(), FakeSiteBuilder()
            )
            response = client.get(f"/api/jobs/{job_id}")

        assert response.status_code == 404
        assert response.json() == {"error": "Job not found"}


class TestProperty18StatusErrors:
    """Property 18: Status endpoint error responses."""

    @pytest.mark.parametrize("job_id", ["not-a-uuid", "123", "job-abc"])
    def test_malformed_id_rejected(self, client, job_id: str) -> None:
        response = client.get(f"/api/jobs/{job_id}")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid job ID"}

    def test_missing_id_rejected(self, client) -> None:
        assert client.get("/api/jobs/").status_code == 400

    @pytest.mark.parametrize("method", ["HEAD", "POST", "PUT", "DELETE", "OPTIONS"])
    def test_non_get_rejected(self, client, method: str) -> None:
        response = client.request(method, f"/api/jobs/{uuid4()}")

        assert response.status_code == 405
        assert response.headers["content-type"] == "application/json"

    def test_storage_failure_is_500(self, client) -> None:
        client.app.state.services.status.get = AsyncMock(side_effect=JobStoreError("down"))

        response = client.get(f"/api/jobs/{uuid4()}")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestWordPressSites:
    """Tests for the WordPress site registry endpoints."""

    def test_add_and_list_sites(self, client) -> None:
        first = client.post(
            "/api/admin/wp/sites",
            json={"url": "https://blog-one.example.com", "credentials": {"user": "admin"}},
        )
        second = client.post(
            "/api/admin/wp/sites",
            json={"url": "https://blog-two.example.com", "credentials": "app-password"},
        )

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["platform"] == "wordpress"
        assert "createdAt" in first.json()

        listed = client.get("/api/admin/wp/sites")
        assert listed.status_code == 200
        assert [s["url"] for s in listed.json()] == [
            "https://blog-two.example.com",
            "https://blog-one.example.com",
        ]

    @pytest.mark.parametrize(
        "body",
        [{}, {"url": "https://blog.example.com"}, {"credentials": "x"}, {"url": " ", "credentials": "x"}],
    )
    def test_missing_fields_rejected(self, client, body: dict) -> None:
        response = client.post("/api/admin/wp/sites", json=body)

        assert response.status_code == 400
        assert response.json() == {"message": "Missing url or credentials"}

    @pytest.mark.parametrize("method", ["HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"])
    def test_other_methods_rejected(self, client, method: str) -> None:
        response = client.request(method, "/api/admin/wp/sites")

        assert response.status_code == 405
        assert response.headers["allow"] == "GET, POST"

    def test_storage_failure_is_500(self, test_settings, site_builder) -> None:
        broken = MagicMock()
        broken.table.return_value.select.return_value.eq.return_value.order.return_value.execute.side_effect = (
            RuntimeError("down")
        )
        client = make_client(test_settings, broken, site_builder)

        response = client.get("/api/admin/wp/sites")

        assert response.status_code == 500
        assert response.json() == {"message": "Internal server error"}


class TestAppStartup:
    """Tests for application construction and lifespan."""

    def test_artifact_dir_created_at_startup(self, test_settings, site_builder) -> None:
        artifact_dir = Path(test_settings.artifact_dir)
        services = build_services(test_settings, MockSupabaseClient(), site_builder=site_builder)
        app = create_app(services)

        assert not artifact_dir.exists()

        with TestClient(app) as client:
            assert artifact_dir.is_dir()
            assert client.get("/jobs/missing.pdf").status_code == 404
