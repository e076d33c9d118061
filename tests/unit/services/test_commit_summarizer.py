"""Unit tests for the commit summarizer interpreter."""

from __future__ import annotations

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.schemas.commit_summary import CommitSummary
from app.services.interpreter.base import InterpreterNotConfiguredError, InterpreterParseError
from app.services.interpreter.commit_summary import (
    MAX_COMMITS_IN_PROMPT,
    MAX_MESSAGE_CHARS,
    CommitSummarizer,
    strip_code_fence,
)
from tests.helpers.factories import make_commit, make_commits

VALID_SUMMARY = {
    "keyThemes": ["Authentication", "Performance"],
    "technicalAreas": [{"name": "API", "count": 3}],
    "accomplishments": ["Shipped OAuth login"],
    "commitsByType": [{"type": "feature", "count": 2, "description": "New login flow"}],
    "timelineHighlights": [{"date": "2024-01-10", "description": "Login released"}],
    "overallSummary": "The team shipped login and sped up the API.",
}


def _message(text: str) -> SimpleNamespace:
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


@pytest.fixture
def summarizer() -> CommitSummarizer:
    instance = CommitSummarizer(api_key="sk-ant-test")
    instance._client = MagicMock()
    instance._client.messages.create = AsyncMock(return_value=_message(json.dumps(VALID_SUMMARY)))
    return instance


class TestStripCodeFence:
    def test_json_fence(self):
        assert strip_code_fence('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self):
        assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_no_fence(self):
        assert strip_code_fence('  {"a": 1}\n') == '{"a": 1}'


class TestParseOutput:
    def test_valid_summary(self, summarizer):
        summary = summarizer.parse_output(json.dumps(VALID_SUMMARY))

        assert summary.key_themes == ["Authentication", "Performance"]
        assert summary.technical_areas[0].name == "API"
        assert summary.commits_by_type[0].type == "feature"
        assert summary.timeline_highlights[0].date == "2024-01-10"
        assert summary.overall_summary.startswith("The team shipped")

    def test_fenced_summary(self, summarizer):
        summary = summarizer.parse_output(f"```json\n{json.dumps(VALID_SUMMARY)}\n```")

        assert summary.accomplishments == ["Shipped OAuth login"]

    def test_not_json(self, summarizer):
        with pytest.raises(InterpreterParseError) as exc_info:
            summarizer.parse_output("Here is your summary: the team did great")

        assert exc_info.value.raw_response == "Here is your summary: the team did great"

    def test_wrong_shape(self, summarizer):
        with pytest.raises(InterpreterParseError, match="unexpected shape"):
            summarizer.parse_output(json.dumps({"keyThemes": "not a list"}))

    def test_serializes_camel_case(self, summarizer):
        summary = summarizer.parse_output(json.dumps(VALID_SUMMARY))

        assert summary.model_dump(by_alias=True) == VALID_SUMMARY


class TestFormatInput:
    def test_commit_records(self, summarizer):
        commits = [
            make_commit("a", login="octocat", message="Add login"),
            make_commit("b", login=None, name="Unlinked Dev", repository="acme/web"),
        ]

        prompt = summarizer.format_input(commits)
        records = json.loads(prompt.split("\n\n", 1)[1])

        assert prompt.startswith("Summarize these 2 commits")
        assert records[0] == {
            "message": "Add login",
            "date": "2024-01-10T12:00:00Z",
            "author": "octocat",
            "repository": "acme/api",
            "url": "https://github.com/acme/api/commit/a",
        }
        assert records[1]["author"] == "Unlinked Dev"

    def test_truncates_long_input(self, summarizer):
        commits = make_commits(MAX_COMMITS_IN_PROMPT + 10, message="x" * (MAX_MESSAGE_CHARS * 2))

        records = json.loads(summarizer.format_input(commits).split("\n\n", 1)[1])

        assert len(records) == MAX_COMMITS_IN_PROMPT
        assert len(records[0]["message"]) == MAX_MESSAGE_CHARS


@pytest.mark.anyio
class TestSummarize:
    async def test_calls_claude(self, summarizer):
        summary = await summarizer.summarize(make_commits(3))

        assert isinstance(summary, CommitSummary)
        kwargs = summarizer._client.messages.create.await_args.kwargs
        assert kwargs["temperature"] == 0.2
        assert kwargs["messages"][0]["role"] == "user"
        assert "Summarize these 3 commits" in kwargs["messages"][0]["content"]
        assert "keyThemes" in kwargs["system"]

    async def test_empty_input_skips_api(self, summarizer):
        summary = await summarizer.summarize([])

        assert summary == CommitSummary.empty()
        summarizer._client.messages.create.assert_not_awaited()

    async def test_ignores_non_text_blocks(self, summarizer):
        summarizer._client.messages.create.return_value = SimpleNamespace(
            content=[
                SimpleNamespace(type="thinking", thinking="..."),
                SimpleNamespace(type="text", text=json.dumps(VALID_SUMMARY)),
            ]
        )

        summary = await summarizer.summarize(make_commits(1))

        assert summary.key_themes == ["Authentication", "Performance"]

    async def test_not_configured(self):
        unconfigured = CommitSummarizer(api_key="")
        unconfigured.api_key = ""

        with pytest.raises(InterpreterNotConfiguredError):
            await unconfigured.summarize(make_commits(1))
