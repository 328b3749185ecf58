"""Exception hierarchy for syslog parsing and rendering.

Every error raised by the codecs and header assemblers derives from
``SyslogError`` (itself a ``ValueError``), so callers can catch the whole
family in one place:

    try:
        message = parse_message(line)
    except SyslogError as exc:
        ...
"""
from __future__ import annotations


class SyslogError(ValueError):
    """Base class for all syslogwire errors."""


class MalformedPriority(SyslogError):
    """The ``<NNN>`` token is missing, unterminated, empty or non-numeric."""


class OutOfRange(MalformedPriority):
    """A priority value outside 0..191."""

    def __init__(self, priority: int) -> None:
        super().__init__(f"priority {priority} outside 0..191")
        self.priority = priority


class InvalidMonth(SyslogError):
    """Unrecognised three-letter month in a legacy timestamp."""

    def __init__(self, token: str) -> None:
        super().__init__(f"invalid month {token!r}")
        self.token = token


class InvalidTimestamp(SyslogError):
    """Malformed or impossible timestamp."""


class MalformedStructuredData(SyslogError):
    """Broken RFC 5424 structured-data element."""


class HeaderParseFailed(SyslogError):
    """A header field could not be parsed.

    Attributes:
        field:    Name of the first field that failed (e.g. ``"timestamp"``).
        position: Offset into the input where that field starts.
        reason:   Human-readable failure text.
        cause:    The lower-level ``SyslogError`` when one triggered the
                  failure, otherwise ``None``. Also chained as ``__cause__``.
    """

    def __init__(
        self,
        field: str,
        position: int,
        reason: str,
        cause: SyslogError | None = None,
    ) -> None:
        super().__init__(f"{field} at offset {position}: {reason}")
        self.field = field
        self.position = position
        self.reason = reason
        self.cause = cause
