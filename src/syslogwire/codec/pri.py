"""PRI codec: facility/severity <-> the ``<NNN>`` priority token.

    PRI = facility * 8 + severity      (0 <= PRI <= 191)
"""
from __future__ import annotations

from enum import IntEnum

from ..errors import MalformedPriority, OutOfRange

MAX_PRIORITY = 191


class Facility(IntEnum):
    KERN = 0
    USER = 1
    MAIL = 2
    DAEMON = 3
    AUTH = 4
    SYSLOG = 5
    LPR = 6
    NEWS = 7
    UUCP = 8
    CRON = 9
    AUTHPRIV = 10
    FTP = 11
    NTP = 12
    AUDIT = 13
    ALERT = 14
    CLOCKD = 15
    LOCAL0 = 16
    LOCAL1 = 17
    LOCAL2 = 18
    LOCAL3 = 19
    LOCAL4 = 20
    LOCAL5 = 21
    LOCAL6 = 22
    LOCAL7 = 23


class Severity(IntEnum):
    EMERG = 0
    ALERT = 1
    CRIT = 2
    ERR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7


def encode_pri(facility: Facility, severity: Severity) -> int:
    return int(facility) * 8 + int(severity)


def decode_pri(priority: int) -> tuple[Facility, Severity]:
    """Split a priority value into its facility and severity.

    Raises:
        OutOfRange: if ``priority`` is not within 0..191.
    """
    if not 0 <= priority <= MAX_PRIORITY:
        raise OutOfRange(priority)
    return Facility(priority // 8), Severity(priority % 8)


def parse_pri(text: str, pos: int = 0) -> tuple[Facility, Severity, int]:
    """Parse a ``<NNN>`` token starting at ``pos``.

    Returns ``(facility, severity, end)`` where ``end`` is the offset just
    past the closing ``>``.

    Raises:
        MalformedPriority: missing brackets, empty or non-decimal token.
        OutOfRange: the decimal value is above 191.
    """
    if not text.startswith("<", pos):
        raise MalformedPriority(f"expected '<' at offset {pos}")
    close = text.find(">", pos + 1)
    if close == -1:
        raise MalformedPriority("unterminated priority, missing '>'")
    token = text[pos + 1:close]
    if not token:
        raise MalformedPriority("empty priority")
    if not (token.isascii() and token.isdigit()):
        raise MalformedPriority(f"priority {token!r} is not a decimal integer")
    facility, severity = decode_pri(int(token))
    return facility, severity, close + 1


def format_pri(facility: Facility, severity: Severity) -> str:
    return f"<{encode_pri(facility, severity)}>"
