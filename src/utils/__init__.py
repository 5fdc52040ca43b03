"""Utility modules for the site builder service."""

from src.utils.errors import (
    ArtifactStorageError,
    FormValidationError,
    InvalidFormatError,
    InvalidJobTransitionError,
    JobNotFoundError,
    JobStoreError,
    MissingRequiredFieldError,
    SiteBuildAPIError,
    SiteBuildError,
    SiteBuilderAppError,
    SiteRegistryError,
    StorageError,
)

__all__ = [
    "SiteBuilderAppError",
    "FormValidationError",
    "MissingRequiredFieldError",
    "InvalidFormatError",
    "SiteBuildError",
    "SiteBuildAPIError",
    "StorageError",
    "JobStoreError",
    "ArtifactStorageError",
    "SiteRegistryError",
    "JobNotFoundError",
    "InvalidJobTransitionError",
]
