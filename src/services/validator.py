"""Form validation for site builder submissions.

Checks run in a fixed order and the first failure wins, so a caller only ever
sees one message per submission.
"""

import json
import re
from typing import Any, Mapping, Optional, Sequence, TypeVar

from pydantic import AnyUrl, BaseModel, TypeAdapter

from src.models.submission import (
    ContentScheduling,
    FormSubmission,
    PbnSettings,
    SiloStructure,
)
from src.utils.errors import InvalidFormatError, MissingRequiredFieldError


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
YOUTUBE_MARKERS = ("youtube.com/", "youtu.be/")
CLOUD_PLATFORMS = ("google", "aws", "azure")

_url_adapter = TypeAdapter(AnyUrl)

SectionT = TypeVar("SectionT", bound=BaseModel)


def _text(fields: Mapping[str, Any], name: str) -> str:
    """Read a raw form value as a string; absent values read as empty."""
    value = fields.get(name)
    if value is None:
        return ""
    return str(value)


def _loads(raw: str) -> Any:
    """Decode JSON; nesting too deep to decode is reported as ValueError."""
    try:
        return json.loads(raw)
    except RecursionError:
        raise ValueError("value is nested too deeply")


def _parse_string_list(raw: Optional[str]) -> list[str]:
    """Parse a JSON-encoded list of strings, raising ValueError otherwise."""
    if raw is None:
        raise ValueError("missing value")
    parsed = _loads(raw)
    if not isinstance(parsed, list) or not all(isinstance(item, str) for item in parsed):
        raise ValueError("expected a list of strings")
    return parsed


def is_valid_url(url: str) -> bool:
    """Whether ``url`` parses as a well-formed absolute URL."""
    try:
        _url_adapter.validate_python(url)
    except ValueError:
        return False
    return True


def is_valid_youtube_url(url: str) -> bool:
    """Whether ``url`` points at YouTube. Empty entries are allowed."""
    if not url:
        return True
    return any(marker in url for marker in YOUTUBE_MARKERS)


def _parse_section(
    fields: Mapping[str, Any], name: str, model: type[SectionT]
) -> Optional[SectionT]:
    """Parse an optional JSON object section, or fail with a section-specific message."""
    raw = _text(fields, name)
    if not raw:
        return None
    try:
        return model.model_validate(_loads(raw))
    except (ValueError, TypeError):
        raise InvalidFormatError(f"Invalid {name} format", field=name)


def validate_form(
    fields: Mapping[str, Any],
    logo_image_paths: Sequence[str] = (),
) -> FormSubmission:
    """
    Validate raw submitted form fields.

    Args:
        fields: Raw, string-encoded form values keyed by form field name
        logo_image_paths: Locations of already-saved logo uploads

    Returns:
        The typed FormSubmission

    Raises:
        MissingRequiredFieldError: If a required value is absent or blank
        InvalidFormatError: If a value is present but malformed
    """
    # 1. Keywords must be a JSON list of strings
    try:
        keywords = _parse_string_list(fields.get("keywords"))
    except (ValueError, TypeError):
        raise InvalidFormatError("Invalid keywords format", field="keywords")

    # 2. At least one keyword
    keywords = [k.strip() for k in keywords if k.strip()]
    if not keywords:
        raise MissingRequiredFieldError("At least one keyword is required", field="keywords")

    # 3. Contact email
    google_account = _text(fields, "googleAccount").strip()
    if not google_account:
        raise MissingRequiredFieldError(
            "Google account email is required", field="googleAccount"
        )
    if not EMAIL_PATTERN.match(google_account):
        raise InvalidFormatError(
            "Invalid email format for Google account", field="googleAccount"
        )

    # 4. Business description
    business_description = _text(fields, "businessDescription")
    if not business_description.strip():
        raise MissingRequiredFieldError(
            "Business description is required", field="businessDescription"
        )

    # 5. Optional URLs
    business_url = _text(fields, "businessUrl").strip()
    if business_url and not is_valid_url(business_url):
        raise InvalidFormatError("Invalid business URL format", field="businessUrl")

    profile_url = _text(fields, "googleBusinessProfileUrl").strip()
    if profile_url and not is_valid_url(profile_url):
        raise InvalidFormatError(
            "Invalid Google Business Profile URL format", field="googleBusinessProfileUrl"
        )

    # 6. YouTube videos; an absent field is an empty list
    raw_videos = fields.get("youtubeVideos")
    try:
        videos = _parse_string_list(raw_videos) if raw_videos else []
    except (ValueError, TypeError):
        raise InvalidFormatError("Invalid YouTube URLs format", field="youtubeVideos")
    for url in videos:
        if url.strip() and not is_valid_youtube_url(url):
            raise InvalidFormatError(f"Invalid YouTube URL: {url}", field="youtubeVideos")
    videos = [url.strip() for url in videos if url.strip()]

    # 7. Author bio
    generate_author_bio = _text(fields, "generateAuthorBio").strip().lower() == "true"
    author_name = _text(fields, "authorName").strip()
    if generate_author_bio and not author_name:
        raise MissingRequiredFieldError("Author name is required", field="authorName")

    # 8. Optional structured sections
    silo_structure = _parse_section(fields, "siloStructure", SiloStructure)
    content_scheduling = _parse_section(fields, "contentScheduling", ContentScheduling)
    pbn_settings = _parse_section(fields, "pbnSettings", PbnSettings)

    raw_expertise = fields.get("authorExpertise")
    try:
        expertise = _parse_string_list(raw_expertise) if raw_expertise else []
    except (ValueError, TypeError):
        raise InvalidFormatError("Invalid authorExpertise format", field="authorExpertise")

    cloud_platform = _text(fields, "cloudPlatform").strip() or "google"
    if cloud_platform not in CLOUD_PLATFORMS:
        raise InvalidFormatError("Invalid cloud platform", field="cloudPlatform")

    return FormSubmission(
        keywords=keywords,
        google_account=google_account,
        business_description=business_description,
        niche_utility=_text(fields, "nicheUtility"),
        business_url=business_url,
        youtube_videos=videos,
        google_business_profile_url=profile_url,
        custom_html=_text(fields, "customHtml"),
        logo_image_paths=list(logo_image_paths),
        author_name=author_name,
        author_expertise=[e.strip() for e in expertise if e.strip()],
        generate_author_bio=generate_author_bio,
        silo_structure=silo_structure,
        content_scheduling=content_scheduling,
        pbn_settings=pbn_settings,
        cloud_platform=cloud_platform,
    )
