"""Custom exception classes for the site builder service."""

from typing import Optional


class SiteBuilderAppError(Exception):
    """Base exception for all application errors."""

    pass


class FormValidationError(SiteBuilderAppError):
    """Submitted form data was rejected. The message is shown to the user."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        self.message = message
        self.field = field
        super().__init__(message)


class MissingRequiredFieldError(FormValidationError):
    """A required form field is absent or blank."""

    pass


class InvalidFormatError(FormValidationError):
    """A form field is present but malformed."""

    pass


class SiteBuildError(SiteBuilderAppError):
    """The site generation engine failed to build a site."""

    pass


class SiteBuildAPIError(SiteBuildError):
    """The site generation engine returned an error response."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        super().__init__(f"Site builder error {status_code}: {message}")


class StorageError(SiteBuilderAppError):
    """Errors from durable storage."""

    pass


class JobStoreError(StorageError):
    """Reading or writing a job record failed."""

    pass


class ArtifactStorageError(StorageError):
    """Writing a generated artifact failed."""

    pass


class SiteRegistryError(StorageError):
    """Reading or writing a registered site failed."""

    pass


class JobNotFoundError(SiteBuilderAppError):
    """No job exists for the requested id."""

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job not found: {job_id}")


class InvalidJobTransitionError(SiteBuilderAppError):
    """An update would move a job against its lifecycle."""

    pass
