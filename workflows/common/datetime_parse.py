"""Helpers for the Brazilian date and time formats used in booking summaries."""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Optional

from zoneinfo import ZoneInfo

from workflows.common.types import DateResult, InvalidDate

DEFAULT_TIMEZONE = "America/Sao_Paulo"

# Day first (DD/MM/YYYY), the Brazilian convention.
_DATE_DMY = re.compile(r"^\s*(?P<day>\d{1,2})/(?P<month>\d{1,2})/(?P<year>\d{4})\s*$")

_TIME_24H = re.compile(r"^\s*([01]?\d|2[0-3]):([0-5]\d)\s*$")


def resolve_date(date_raw: Optional[str]) -> DateResult:
    """Parse ``DD/MM/YYYY`` (day first) into a calendar date.

    Returns ``InvalidDate`` instead of raising when the text has the wrong
    shape, the day is above 31, the month is above 12, or the combination
    does not exist (e.g. 31/02/2025).
    """

    raw = date_raw or ""
    match = _DATE_DMY.match(raw)
    if not match:
        return InvalidDate(raw=raw, reason="bad_format")

    day = int(match.group("day"))
    month = int(match.group("month"))
    year = int(match.group("year"))
    if day > 31:
        return InvalidDate(raw=raw, reason="day_out_of_range")
    if month > 12:
        return InvalidDate(raw=raw, reason="month_out_of_range")
    try:
        return date(year, month, day)
    except ValueError:
        return InvalidDate(raw=raw, reason="not_a_calendar_date")


def normalize_time(time_raw: Optional[str]) -> Optional[str]:
    """Return ``HH:MM`` zero-padded, or None if the text is not a 24h time."""

    match = _TIME_24H.match(time_raw or "")
    if not match:
        return None
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def format_date_br(value: date) -> str:
    """Render a date the way the assistant writes it (DD/MM/YYYY)."""

    return value.strftime("%d/%m/%Y")


def tomorrow(reference: Optional[datetime] = None, timezone: str = DEFAULT_TIMEZONE) -> date:
    """Return the calendar day after ``reference`` in the company timezone."""

    tz = ZoneInfo(timezone)
    now = reference.astimezone(tz) if reference else datetime.now(tz)
    return now.date() + timedelta(days=1)


__all__ = [
    "resolve_date",
    "normalize_time",
    "format_date_br",
    "tomorrow",
]
