"""Registered site Pydantic models."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.models.job import utc_now


class Site(BaseModel):
    """A site managed from the admin area."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(min_length=1)
    url: str = Field(min_length=1)
    platform: Literal["wordpress", "google"] = "wordpress"
    credentials: Any
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("url")
    @classmethod
    def not_whitespace(cls, v: str) -> str:
        """Validate that field is not only whitespace."""
        if not v.strip():
            raise ValueError("field cannot be only whitespace")
        return v
