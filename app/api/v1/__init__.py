from app.api.v1 import (
    activity,
    contributors,
    installations,
    repositories,
    summary,
)

__all__ = [
    "activity",
    "contributors",
    "installations",
    "repositories",
    "summary",
]
