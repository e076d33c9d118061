"""API dependencies - re-exports from submodules."""

from .activity import (
    Aggregator,
    Summarizer,
    get_activity_aggregator,
    get_summarizer,
)
from .auth import (
    INSTALLATION_COOKIE,
    INSTALLATION_HEADER,
    CurrentAccess,
    CurrentCredential,
    CurrentViewer,
    get_credential,
    get_github_access,
    get_viewer,
    security,
)

__all__ = [
    # Auth
    "security",
    "INSTALLATION_COOKIE",
    "INSTALLATION_HEADER",
    "get_credential",
    "get_viewer",
    "get_github_access",
    "CurrentAccess",
    "CurrentCredential",
    "CurrentViewer",
    # Activity
    "get_activity_aggregator",
    "get_summarizer",
    "Aggregator",
    "Summarizer",
]
