"""RFC 3164 (BSD syslog) header parser.

    <PRI>Mmm dd hh:mm:ss [hostname] [appname][:] message

The legacy grammar is ambiguous: ``<34>Oct 11 22:14:15 hello world`` could
be a hostname plus app-name or just a message. Hostname and app-name are
each attempted once, greedily, in that order; a token once consumed is
never handed back to the body.
"""
from __future__ import annotations

import logging
import re
from typing import Iterator

from ..codec.pri import parse_pri
from ..codec.timestamp import YearResolver, make_timestamp, parse_legacy_timestamp
from ..errors import HeaderParseFailed, SyslogError
from ..message import Header, Message
from ..text import Text, take

logger = logging.getLogger(__name__)

_SPACE_RE = re.compile(r"\s*")
# Whitespace then a hostname / app-name token (anything but space and ':').
_TOKEN_RE = re.compile(r"\s+([^\s:]+)")


def _optional_token(text: str, pos: int, borrow: bool) -> tuple[Text | None, int]:
    m = _TOKEN_RE.match(text, pos)
    if not m:
        return None, pos
    if m.group(1) == "-":
        return None, m.end()
    return take(text, m.start(1), m.end(1), borrow), m.end()


def parse_header_at(
    text: str, resolve_year: YearResolver, borrow: bool = False
) -> tuple[Header, int]:
    """Parse the header and return it with the offset where the body starts."""
    facility = severity = None
    pos = 0
    if text.startswith("<"):
        try:
            facility, severity, pos = parse_pri(text)
        except SyslogError as exc:
            raise HeaderParseFailed("priority", 0, str(exc), exc) from exc

    pos = _SPACE_RE.match(text, pos).end()
    try:
        date, end = parse_legacy_timestamp(text, pos)
        timestamp = make_timestamp(date, resolve_year)
    except SyslogError as exc:
        raise HeaderParseFailed("timestamp", pos, str(exc), exc) from exc
    pos = end

    hostname, pos = _optional_token(text, pos, borrow)
    appname, pos = _optional_token(text, pos, borrow)
    if text.startswith(":", pos):
        pos += 1
    pos = _SPACE_RE.match(text, pos).end()

    header = Header(
        facility=facility,
        severity=severity,
        timestamp=timestamp,
        hostname=hostname,
        appname=appname,
    )
    return header, pos


def parse_header(
    text: str, resolve_year: YearResolver, borrow: bool = False
) -> tuple[Header, str]:
    """Parse an RFC 3164 header.

    Args:
        text:         One syslog line.
        resolve_year: Called once with the ``IncompleteDate`` to pick the
                      year; the wire format does not carry one.
        borrow:       Return text fields as ``Span`` views of ``text``.

    Returns:
        ``(header, rest)`` where ``rest`` is the unconsumed message body.

    Raises:
        HeaderParseFailed: naming the first field that could not be parsed.
    """
    header, pos = parse_header_at(text, resolve_year, borrow)
    return header, text[pos:]


def parse_message(
    text: str, resolve_year: YearResolver, borrow: bool = False
) -> Message:
    """Parse a whole RFC 3164 line into a ``Message``."""
    header, pos = parse_header_at(text, resolve_year, borrow)
    return Message.from_header(header, (), take(text, pos, len(text), borrow))


class Rfc3164Parser:
    """Parse RFC 3164 lines with a caller-supplied year strategy."""

    def __init__(self, resolve_year: YearResolver, borrow: bool = False) -> None:
        self._resolve_year = resolve_year
        self._borrow = borrow

    @property
    def name(self) -> str:
        return "rfc3164"

    def parse_line(self, line: str) -> Message | None:
        line = line.rstrip("\r\n")
        if not line.strip():
            return None
        message = parse_message(line, self._resolve_year, self._borrow)
        logger.debug("Parsed rfc3164 line: host=%s app=%s", message.hostname, message.appname)
        return message

    def parse_file(self, path: str) -> Iterator[Message]:
        with open(path, encoding="utf-8", errors="replace") as f:
            for line in f:
                message = self.parse_line(line)
                if message is not None:
                    yield message
