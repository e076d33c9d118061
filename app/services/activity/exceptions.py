"""Exceptions for the activity pipeline.

Service-level errors carry the upstream cause; the API layer decides the
HTTP status and error code.
"""


class ActivityError(Exception):
    """Base class for activity pipeline failures."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.message = message
        self.cause = cause
        super().__init__(message)


class RepositoryDiscoveryError(ActivityError):
    """A repository listing failed; discovery has no partial results."""


class CommitFetchError(ActivityError):
    """Commit fetching failed outside the per-repository recovery path."""


class ViewerRequiredError(ActivityError):
    """The "me" contributor was requested without a known GitHub user."""


class InvalidPageLimitError(ValueError):
    """Page size must be a positive integer."""
