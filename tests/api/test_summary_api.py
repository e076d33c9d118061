"""API endpoint tests for GET /api/v1/summary."""

from __future__ import annotations

import anthropic
import httpx
import pytest
from httpx import AsyncClient

from app.services.interpreter import InterpreterNotConfiguredError, InterpreterParseError

JANUARY = {"since": "2024-01-01", "until": "2024-01-31"}


class TestSummary:
    @pytest.mark.anyio
    async def test_returns_summary_and_commits(self, api_client: AsyncClient, summarizer):
        resp = await api_client.get("/api/v1/summary", params=JANUARY)

        assert resp.status_code == 200
        data = resp.json()
        assert data["aiSummary"]["keyThemes"] == ["Authentication"]
        assert data["aiSummary"]["overallSummary"] == "The team shipped OAuth login."
        assert len(data["commits"]) == 5
        assert data["stats"]["totalCommits"] == 5
        assert "pagination" not in data

        summarized = summarizer.summarize.await_args.args[0]
        assert len(summarized) == 5

    @pytest.mark.anyio
    async def test_respects_filters(self, api_client: AsyncClient, summarizer):
        resp = await api_client.get("/api/v1/summary", params={**JANUARY, "repositories": "acme/web"})

        assert resp.status_code == 200
        assert {c.repository for c in summarizer.summarize.await_args.args[0]} == {"acme/web"}

    @pytest.mark.anyio
    @pytest.mark.parametrize("params", [{}, {"since": "2024-01-01"}, {"until": "2024-01-31"}])
    async def test_requires_explicit_range(self, api_client: AsyncClient, summarizer, params):
        resp = await api_client.get("/api/v1/summary", params=params)

        assert resp.status_code == 400
        assert resp.json()["code"] == "MISSING_DATE_RANGE"
        summarizer.summarize.assert_not_awaited()


class TestSummaryErrors:
    @pytest.mark.anyio
    async def test_unparseable_answer(self, api_client: AsyncClient, summarizer):
        summarizer.summarize.side_effect = InterpreterParseError("Summary response is not valid JSON")

        resp = await api_client.get("/api/v1/summary", params=JANUARY)

        assert resp.status_code == 500
        assert resp.json()["code"] == "SUMMARY_ERROR"

    @pytest.mark.anyio
    async def test_anthropic_failure(self, api_client: AsyncClient, summarizer):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        summarizer.summarize.side_effect = anthropic.APIConnectionError(request=request)

        resp = await api_client.get("/api/v1/summary", params=JANUARY)

        assert resp.status_code == 500
        assert resp.json()["code"] == "SUMMARY_ERROR"

    @pytest.mark.anyio
    async def test_not_configured(self, api_client: AsyncClient, summarizer):
        summarizer.summarize.side_effect = InterpreterNotConfiguredError("ANTHROPIC_API_KEY is not configured")

        resp = await api_client.get("/api/v1/summary", params=JANUARY)

        assert resp.status_code == 500
        assert resp.json()["code"] == "SERVER_CONFIG_ERROR"
