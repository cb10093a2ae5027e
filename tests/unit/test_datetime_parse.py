"""Tests for the DD/MM/YYYY date and 24h time helpers."""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from workflows.common.datetime_parse import format_date_br, normalize_time, resolve_date, tomorrow
from workflows.common.types import InvalidDate


class TestResolveDate:

    @pytest.mark.parametrize("raw,expected", [
        ("05/07/2025", date(2025, 7, 5)),
        ("5/7/2025", date(2025, 7, 5)),
        ("31/12/2025", date(2025, 12, 31)),
        ("29/02/2024", date(2024, 2, 29)),
        (" 01/01/2026 ", date(2026, 1, 1)),
    ])
    def test_day_first_dates(self, raw, expected):
        assert resolve_date(raw) == expected

    @pytest.mark.parametrize("raw,reason", [
        ("32/01/2025", "day_out_of_range"),
        ("15/13/2025", "month_out_of_range"),
        ("31/02/2025", "not_a_calendar_date"),
        ("29/02/2025", "not_a_calendar_date"),
        ("00/07/2025", "not_a_calendar_date"),
        ("ab/cd/efgh", "bad_format"),
        ("2025-07-05", "bad_format"),
        ("05/07/25", "bad_format"),
        ("", "bad_format"),
    ])
    def test_rejects_invalid_dates(self, raw, reason):
        result = resolve_date(raw)

        assert isinstance(result, InvalidDate)
        assert result.reason == reason
        assert result.raw == raw

    def test_none_is_bad_format(self):
        assert resolve_date(None) == InvalidDate(raw="", reason="bad_format")


class TestNormalizeTime:

    @pytest.mark.parametrize("raw,expected", [
        ("14:30", "14:30"),
        ("9:05", "09:05"),
        ("00:00", "00:00"),
        ("23:59", "23:59"),
    ])
    def test_valid_times(self, raw, expected):
        assert normalize_time(raw) == expected

    @pytest.mark.parametrize("raw", ["24:00", "12:60", "1430", "14h30", "", None])
    def test_invalid_times(self, raw):
        assert normalize_time(raw) is None


class TestTomorrow:

    def test_uses_company_timezone(self):
        # 01:30 UTC on the 5th is still the 4th in São Paulo (UTC-3)
        reference = datetime(2025, 7, 5, 1, 30, tzinfo=timezone.utc)

        assert tomorrow(reference, "America/Sao_Paulo") == date(2025, 7, 5)
        assert tomorrow(reference, "UTC") == date(2025, 7, 6)

    def test_month_rollover(self):
        reference = datetime(2025, 1, 31, 15, 0, tzinfo=timezone.utc)

        assert tomorrow(reference) == date(2025, 2, 1)


def test_format_date_br():
    assert format_date_br(date(2025, 7, 5)) == "05/07/2025"
