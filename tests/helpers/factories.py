"""Factories for GitHub payloads and pipeline dataclasses.

``*_json`` builders mirror GitHub REST responses (for read-operation tests);
``make_*`` builders produce the normalized dataclasses (for pipeline tests).
"""

from __future__ import annotations

import itertools
from typing import Any

import httpx

from app.services.github.types import GitHubCommit, GitHubRepo

_ids = itertools.count(1000)


def make_response(
    status_code: int = 200,
    json_data: object = None,
    headers: dict[str, str] | None = None,
    url: str = "https://api.github.com/",
) -> httpx.Response:
    """Build a fake httpx.Response (with a request, so .links and .url work)."""
    return httpx.Response(
        status_code=status_code,
        json=json_data,
        headers=headers or {},
        request=httpx.Request("GET", url),
    )


def next_link(url: str) -> dict[str, str]:
    return {"Link": f'<{url}>; rel="next", <{url}&last=1>; rel="last"'}


# ─────────────────────────────────────────────────────────────────────────────
# GitHub JSON
# ─────────────────────────────────────────────────────────────────────────────


def repo_json(full_name: str, **overrides: Any) -> dict[str, Any]:
    owner, name = full_name.split("/", 1)
    data: dict[str, Any] = {
        "id": next(_ids),
        "name": name,
        "full_name": full_name,
        "owner": {"login": owner},
        "private": False,
        "language": "Python",
        "updated_at": "2024-01-15T10:00:00Z",
        "html_url": f"https://github.com/{full_name}",
        "description": None,
    }
    data.update(overrides)
    return data


def commit_json(
    sha: str,
    message: str = "Fix bug",
    login: str | None = "octocat",
    name: str = "The Octocat",
    date: str = "2024-01-10T12:00:00Z",
) -> dict[str, Any]:
    return {
        "sha": sha,
        "html_url": f"https://github.com/acme/api/commit/{sha}",
        "commit": {
            "message": message,
            "author": {"name": name, "email": f"{name.lower().replace(' ', '.')}@example.com", "date": date},
            "committer": {"name": "GitHub", "date": date},
        },
        "author": {"login": login, "avatar_url": f"https://avatars.example/{login}"} if login else None,
    }


# ─────────────────────────────────────────────────────────────────────────────
# Dataclasses
# ─────────────────────────────────────────────────────────────────────────────


def make_repo(full_name: str, **overrides: Any) -> GitHubRepo:
    owner, name = full_name.split("/", 1)
    fields: dict[str, Any] = {
        "github_id": next(_ids),
        "name": name,
        "full_name": full_name,
        "owner_login": owner,
        "is_private": False,
        "language": "Python",
        "updated_at": "2024-01-15T10:00:00Z",
        "url": f"https://github.com/{full_name}",
    }
    fields.update(overrides)
    return GitHubRepo(**fields)


def make_commit(
    sha: str,
    repository: str = "acme/api",
    login: str | None = "octocat",
    name: str = "The Octocat",
    date: str = "2024-01-10T12:00:00Z",
    message: str | None = None,
) -> GitHubCommit:
    return GitHubCommit(
        sha=sha,
        message=message or f"Commit {sha}",
        author_name=name,
        author_email=f"{name.lower().replace(' ', '.')}@example.com",
        author_login=login,
        date=date,
        repository=repository,
        url=f"https://github.com/{repository}/commit/{sha}",
        author_avatar_url=f"https://avatars.example/{login}" if login else None,
    )


def make_commits(count: int, repository: str = "acme/api", **kwargs: Any) -> list[GitHubCommit]:
    prefix = repository.replace("/", "-")
    return [make_commit(f"{prefix}-{i}", repository=repository, **kwargs) for i in range(count)]
