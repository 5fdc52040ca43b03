"""Site builder form submission models."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr
from pydantic.alias_generators import to_camel

CloudPlatform = Literal["google", "aws", "azure"]


class FormModel(BaseModel):
    """Base for models that mirror the camelCase form payload."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SiloStructure(FormModel):
    """Topic silo layout for the generated site."""

    enabled: StrictBool
    categories: list[StrictStr]


class ScheduleEntry(FormModel):
    """A single scheduled post."""

    date: StrictStr
    title: StrictStr
    publish: StrictBool = True


class ContentScheduling(FormModel):
    """Publishing schedule for generated content."""

    enabled: StrictBool
    schedules: list[ScheduleEntry]


class PbnSettings(FormModel):
    """Private link network settings."""

    enabled: StrictBool
    target_urls: list[StrictStr]
    anchor_texts: list[StrictStr]


class FormSubmission(FormModel):
    """Validated, typed representation of a site builder form."""

    keywords: list[str] = Field(min_length=1)
    google_account: str
    business_description: str
    niche_utility: str = ""
    business_url: str = ""
    youtube_videos: list[str] = Field(default_factory=list)
    google_business_profile_url: str = ""
    custom_html: str = ""
    logo_image_paths: list[str] = Field(default_factory=list)
    author_name: str = ""
    author_expertise: list[str] = Field(default_factory=list)
    generate_author_bio: bool = False
    silo_structure: SiloStructure | None = None
    content_scheduling: ContentScheduling | None = None
    pbn_settings: PbnSettings | None = None
    cloud_platform: CloudPlatform = "google"

    def snapshot(self) -> dict[str, Any]:
        """Return the storable job fields, without uploaded file references."""
        return self.model_dump(mode="json", by_alias=True, exclude={"logo_image_paths"})
