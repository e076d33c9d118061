"""Unit tests for activity query parsing."""

from __future__ import annotations

from datetime import date
from unittest.mock import MagicMock, patch

import pytest

from app.api.v1.utils import get_activity_query, parse_csv, resolve_date_range
from app.core.exceptions import ValidationError
from app.services.activity import GroupBy


class TestParseCsv:
    def test_splits_and_strips(self):
        assert parse_csv(" acme , globex,") == ["acme", "globex"]

    def test_dedupes_in_order(self):
        assert parse_csv("b,a,b") == ["b", "a"]

    def test_empty(self):
        assert parse_csv(None) == []
        assert parse_csv("") == []
        assert parse_csv(" , ") == []


class TestResolveDateRange:
    def test_explicit_bounds(self):
        date_range = resolve_date_range("2024-01-01", "2024-01-31")

        assert date_range.since == date(2024, 1, 1)
        assert date_range.until == date(2024, 1, 31)

    def test_defaults_to_trailing_window(self):
        date_range = resolve_date_range(None, None, default_days=30, today=date(2024, 3, 31))

        assert date_range.since == date(2024, 3, 1)
        assert date_range.until == date(2024, 3, 31)

    def test_since_defaults_relative_to_until(self):
        date_range = resolve_date_range(None, "2024-01-31", default_days=7)

        assert date_range.since == date(2024, 1, 24)

    def test_default_days_from_settings(self):
        with patch("app.api.v1.utils.settings", MagicMock(default_activity_days=2)):
            date_range = resolve_date_range(None, None, today=date(2024, 1, 10))

        assert date_range.since == date(2024, 1, 8)

    def test_single_day(self):
        date_range = resolve_date_range("2024-01-05", "2024-01-05")

        assert date_range.since_timestamp == "2024-01-05T00:00:00Z"
        assert date_range.until_timestamp == "2024-01-05T23:59:59Z"

    @pytest.mark.parametrize(
        ("since", "until"),
        [("2024-02-01", "2024-01-01"), ("2024-13-01", "2024-12-31"), ("yesterday", None)],
    )
    def test_invalid(self, since, until):
        with pytest.raises(ValidationError) as exc_info:
            resolve_date_range(since, until, today=date(2024, 6, 1))

        assert exc_info.value.detail["code"] == "INVALID_DATE_RANGE"


def test_get_activity_query_builds_filters():
    query = get_activity_query(
        since="2024-01-01",
        until="2024-01-31",
        organizations="acme",
        repositories="acme/api,acme/web",
        contributors="me",
        group_by=GroupBy.REPOSITORY,
        generate_group_summaries=True,
    )

    assert query.date_range.since == date(2024, 1, 1)
    assert query.filters.organizations == ["acme"]
    assert query.filters.repositories == ["acme/api", "acme/web"]
    assert query.filters.contributors == ["me"]
    assert query.filters.group_by == GroupBy.REPOSITORY
    assert query.filters.generate_group_summaries is True
