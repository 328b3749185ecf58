"""Ready-made year-resolution strategies for RFC 3164 timestamps.

RFC 3164 senders never transmit the year, so the parsers take a callable
``IncompleteDate -> int``. These factories build the usual ones; callers
always pass one in explicitly.
"""
from __future__ import annotations

import calendar
from datetime import datetime, timezone

from .codec.timestamp import IncompleteDate, YearResolver
from .message import Clock, utcnow


def fixed_year(year: int) -> YearResolver:
    """Always answer ``year``."""

    def resolve(_date: IncompleteDate) -> int:
        return year

    return resolve


def current_year(clock: Clock | None = None) -> YearResolver:
    """The year of the clock at the moment of parsing."""
    now = clock or utcnow

    def resolve(_date: IncompleteDate) -> int:
        return now().year

    return resolve


def rollback_future(clock: Clock | None = None) -> YearResolver:
    """Assume the current year, but step back if that lands in the future.

    A line stamped ``Dec 31 23:59:59`` read on January 1st belongs to last
    year. A Feb 29 that does not exist in the current year belongs to the
    most recent earlier leap year.
    """
    now_fn = clock or utcnow

    def resolve(date: IncompleteDate) -> int:
        now = now_fn()
        year = now.year
        while True:
            try:
                candidate = datetime(
                    year, date.month, date.day, date.hour, date.minute, date.second,
                    tzinfo=timezone.utc,
                )
            except ValueError:
                if (date.month, date.day) != (2, 29) or calendar.isleap(year):
                    # Impossible in any year; make_timestamp reports it.
                    return now.year
                year -= 1
                continue
            if candidate > now.astimezone(timezone.utc):
                year -= 1
                continue
            return year

    return resolve
