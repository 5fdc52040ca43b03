"""Pydantic data models for the site builder service."""

from src.models.job import Job, JobStatusView
from src.models.site import Site
from src.models.submission import (
    ContentScheduling,
    FormSubmission,
    PbnSettings,
    ScheduleEntry,
    SiloStructure,
)

__all__ = [
    "Job",
    "JobStatusView",
    "FormSubmission",
    "SiloStructure",
    "ContentScheduling",
    "ScheduleEntry",
    "PbnSettings",
    "Site",
]
