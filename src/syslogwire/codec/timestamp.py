"""Timestamp grammars for both syslog formats.

RFC 3164:  ``Mmm dd hh:mm:ss`` with no year and no timezone.
RFC 5424:  RFC 3339 ``date-time`` with optional fraction and a mandatory
           offset, or the nil value ``-``.
"""
from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Callable, NamedTuple

from ..errors import InvalidMonth, InvalidTimestamp

_MONTHS = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
    "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}

# Everything after the month token: " dd hh:mm:ss", fields separated by spaces or tabs.
_LEGACY_REST_RE = re.compile(
    r"[ \t]+(?P<day>\d{1,2})"
    r"[ \t]+(?P<hour>\d{1,2}):(?P<minute>\d{2}):(?P<second>\d{2})",
    re.ASCII,
)

_RFC3339_RE = re.compile(
    r"(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>Z|[+-]\d{2}:\d{2})",
    re.ASCII,
)


class IncompleteDate(NamedTuple):
    """A legacy timestamp before its year is known."""

    month: int
    day: int
    hour: int
    minute: int
    second: int


YearResolver = Callable[[IncompleteDate], int]


def parse_month(token: str) -> int:
    try:
        return _MONTHS[token]
    except KeyError:
        raise InvalidMonth(token) from None


def parse_legacy_timestamp(text: str, pos: int = 0) -> tuple[IncompleteDate, int]:
    """Parse ``Mmm dd hh:mm:ss`` at ``pos``.

    Returns the incomplete date and the offset just past the seconds.

    Raises:
        InvalidMonth:     the first three characters are not a month name.
        InvalidTimestamp: the rest does not follow the fixed layout.
    """
    month = parse_month(text[pos:pos + 3])
    m = _LEGACY_REST_RE.match(text, pos + 3)
    if not m:
        raise InvalidTimestamp(f"malformed legacy timestamp at offset {pos}")
    date = IncompleteDate(
        month=month,
        day=int(m["day"]),
        hour=int(m["hour"]),
        minute=int(m["minute"]),
        second=int(m["second"]),
    )
    return date, m.end()


def make_timestamp(date: IncompleteDate, resolve_year: YearResolver) -> datetime:
    """Complete a legacy date, anchored at UTC.

    ``resolve_year`` is called exactly once. The wire format carries no zone,
    so UTC is an approximation, not an inference.
    """
    year = resolve_year(date)
    try:
        return datetime(
            year, date.month, date.day, date.hour, date.minute, date.second,
            tzinfo=timezone.utc,
        )
    except ValueError as exc:
        raise InvalidTimestamp(f"{year}-{date.month:02d}-{date.day:02d}: {exc}") from exc


def _parse_offset(raw: str) -> timezone:
    if raw == "Z":
        return timezone.utc
    hours, minutes = int(raw[1:3]), int(raw[4:6])
    if hours > 23 or minutes > 59:
        raise InvalidTimestamp(f"offset {raw!r} out of range")
    delta = timedelta(hours=hours, minutes=minutes)
    return timezone(-delta if raw[0] == "-" else delta)


def parse_rfc5424_timestamp(text: str, pos: int = 0) -> tuple[datetime | None, int]:
    """Parse an RFC 3339 timestamp (or ``-``) at ``pos``.

    Returns ``(timestamp, end)``; ``timestamp`` is ``None`` for the nil
    value. Fractions finer than a microsecond are truncated.
    """
    if text.startswith("-", pos):
        return None, pos + 1
    m = _RFC3339_RE.match(text, pos)
    if not m:
        raise InvalidTimestamp(f"malformed RFC 3339 timestamp at offset {pos}")
    fraction = m["fraction"] or ""
    microsecond = int(fraction[:6].ljust(6, "0")) if fraction else 0
    tz = _parse_offset(m["offset"])
    try:
        ts = datetime(
            int(m["year"]), int(m["month"]), int(m["day"]),
            int(m["hour"]), int(m["minute"]), int(m["second"]),
            microsecond, tzinfo=tz,
        )
    except ValueError as exc:
        raise InvalidTimestamp(f"{m.group(0)!r}: {exc}") from exc
    return ts, m.end()


def format_timestamp(ts: datetime) -> str:
    """Render an aware datetime as RFC 3339 text."""
    if ts.tzinfo is None:
        raise InvalidTimestamp("cannot render a naive datetime")
    return ts.isoformat()
