"""Pick RFC 5424 or RFC 3164 for a line and delegate to the right parser."""
from __future__ import annotations

import logging
import re
from typing import Iterator

from ..codec.timestamp import YearResolver
from ..errors import SyslogError
from ..message import Message
from .base import MessageParser
from .rfc3164 import Rfc3164Parser
from .rfc5424 import Rfc5424Parser

logger = logging.getLogger(__name__)

# RFC 5424: <PRI> immediately followed by a VERSION and a space.
_RFC5424_RE = re.compile(r"^<\d{1,3}>[1-9]\d{0,2} ", re.ASCII)

FORMATS = ("auto", "rfc3164", "rfc5424")


def detect_format(line: str) -> str:
    """Return 'rfc5424' or 'rfc3164' for a single line."""
    if _RFC5424_RE.match(line):
        return "rfc5424"
    return "rfc3164"


def parse_message(line: str, resolve_year: YearResolver, borrow: bool = False) -> Message:
    """Parse one line in whichever format it is written in.

    ``resolve_year`` is only consulted for RFC 3164 lines.
    """
    return AutoDetectParser(resolve_year, borrow=borrow).parse(line)


class AutoDetectParser:
    """Detect the wire format of each line and delegate.

    ``hint`` pins every line to one format; with ``"auto"`` (the default)
    the format is detected per line, since syslog collectors commonly
    receive both.
    """

    def __init__(
        self, resolve_year: YearResolver, hint: str = "auto", borrow: bool = False
    ) -> None:
        if hint not in FORMATS:
            raise ValueError(f"Unknown format: {hint}. Valid formats: {', '.join(FORMATS)}")
        self._hint = hint
        self._parsers: dict[str, MessageParser] = {
            "rfc3164": Rfc3164Parser(resolve_year, borrow=borrow),
            "rfc5424": Rfc5424Parser(borrow=borrow),
        }

    @property
    def name(self) -> str:
        return self._hint

    def parser_for(self, line: str) -> MessageParser:
        fmt = self._hint if self._hint != "auto" else detect_format(line)
        logger.debug("Using %s parser", fmt)
        return self._parsers[fmt]

    def parse(self, line: str) -> Message:
        message = self.parse_line(line)
        if message is None:
            raise SyslogError("cannot parse a blank line")
        return message

    def parse_line(self, line: str) -> Message | None:
        if not line.strip():
            return None
        return self.parser_for(line).parse_line(line)

    def parse_file(self, path: str) -> Iterator[Message]:
        with open(path, encoding="utf-8", errors="replace") as f:
            for line in f:
                message = self.parse_line(line)
                if message is not None:
                    yield message
