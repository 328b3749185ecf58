"""RFC 5424 header and message parser.

    <PRI>VERSION SP TIMESTAMP SP HOSTNAME SP APP-NAME SP PROCID SP MSGID
        SP STRUCTURED-DATA [SP MSG]

Every header field is positional; ``-`` marks an absent value.
"""
from __future__ import annotations

import logging
import re
from typing import Iterator

from ..codec.pri import parse_pri
from ..codec.structured_data import parse_structured_data
from ..codec.timestamp import parse_rfc5424_timestamp
from ..errors import HeaderParseFailed, MalformedStructuredData, SyslogError
from ..message import Header, Message
from ..text import take

logger = logging.getLogger(__name__)

_VERSION_RE = re.compile(r"[1-9][0-9]{0,2}(?![0-9])", re.ASCII)
_FIELD_RE = re.compile(r"[^ ]+")

# (field name, RFC 5424 maximum length)
_IDENTIFIERS = (
    ("hostname", 255),
    ("appname", 48),
    ("procid", 128),
    ("msgid", 32),
)


def _expect_space(text: str, pos: int, field: str) -> int:
    if not text.startswith(" ", pos):
        raise HeaderParseFailed(field, pos, "expected a single space before field")
    return pos + 1


def parse_header_at(text: str, borrow: bool = False) -> tuple[Header, int]:
    """Parse the header; return it with the offset of STRUCTURED-DATA."""
    try:
        facility, severity, pos = parse_pri(text)
    except SyslogError as exc:
        raise HeaderParseFailed("priority", 0, str(exc), exc) from exc

    m = _VERSION_RE.match(text, pos)
    if not m:
        raise HeaderParseFailed("version", pos, "missing or invalid protocol version")
    version = int(m.group(0))
    pos = _expect_space(text, m.end(), "timestamp")

    try:
        timestamp, pos = parse_rfc5424_timestamp(text, pos)
    except SyslogError as exc:
        raise HeaderParseFailed("timestamp", pos, str(exc), exc) from exc

    values = {}
    for name, max_len in _IDENTIFIERS:
        pos = _expect_space(text, pos, name)
        m = _FIELD_RE.match(text, pos)
        if not m:
            raise HeaderParseFailed(name, pos, "field is empty")
        if m.end() - m.start() > max_len:
            raise HeaderParseFailed(name, pos, f"longer than {max_len} characters")
        token = m.group(0)
        values[name] = None if token == "-" else take(text, m.start(), m.end(), borrow)
        pos = m.end()

    pos = _expect_space(text, pos, "structured_data")
    header = Header(
        facility=facility,
        severity=severity,
        timestamp=timestamp,
        version=version,
        **values,
    )
    return header, pos


def parse_header(text: str, borrow: bool = False) -> tuple[Header, str]:
    """Parse an RFC 5424 header.

    Returns ``(header, rest)`` where ``rest`` starts at STRUCTURED-DATA.

    Raises:
        HeaderParseFailed: naming the first field that could not be parsed.
    """
    header, pos = parse_header_at(text, borrow)
    return header, text[pos:]


def parse_message(text: str, borrow: bool = False) -> Message:
    """Parse a whole RFC 5424 line into a ``Message``.

    Raises:
        HeaderParseFailed:       the header is malformed.
        MalformedStructuredData: STRUCTURED-DATA is malformed or not
                                 followed by a space or end of line.
    """
    header, pos = parse_header_at(text, borrow)
    elements, pos = parse_structured_data(text, pos, borrow)
    if pos < len(text):
        if text[pos] != " ":
            raise MalformedStructuredData(
                f"unexpected {text[pos]!r} after structured data at offset {pos}"
            )
        pos += 1
    return Message.from_header(header, elements, take(text, pos, len(text), borrow))


class Rfc5424Parser:
    """Parse RFC 5424 lines."""

    def __init__(self, borrow: bool = False) -> None:
        self._borrow = borrow

    @property
    def name(self) -> str:
        return "rfc5424"

    def parse_line(self, line: str) -> Message | None:
        line = line.rstrip("\r\n")
        if not line.strip():
            return None
        message = parse_message(line, self._borrow)
        logger.debug(
            "Parsed rfc5424 line: host=%s app=%s elements=%d",
            message.hostname, message.appname, len(message.structured_data),
        )
        return message

    def parse_file(self, path: str) -> Iterator[Message]:
        with open(path, encoding="utf-8", errors="replace") as f:
            for line in f:
                message = self.parse_line(line)
                if message is not None:
                    yield message
