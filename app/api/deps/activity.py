"""Activity pipeline dependencies.

Routes receive a ready ActivityAggregator bound to the request's resolved
GitHub access; tests override these to inject fakes.
"""

from typing import Annotated

from fastapi import Depends

from app.services.activity import ActivityAggregator, CommitFetcher, RepositoryDiscovery
from app.services.github import GitHubAccess
from app.services.interpreter import CommitSummarizer, commit_summarizer

from .auth import get_github_access


def get_summarizer() -> CommitSummarizer:
    return commit_summarizer


def get_activity_aggregator(
    access: GitHubAccess = Depends(get_github_access),
    summarizer: CommitSummarizer = Depends(get_summarizer),
) -> ActivityAggregator:
    return ActivityAggregator(
        discovery=RepositoryDiscovery.from_access(access),
        fetcher=CommitFetcher.from_access(access),
        summarizer=summarizer,
    )


Summarizer = Annotated[CommitSummarizer, Depends(get_summarizer)]
Aggregator = Annotated[ActivityAggregator, Depends(get_activity_aggregator)]
