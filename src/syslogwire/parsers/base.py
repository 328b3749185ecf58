"""Parser protocol shared by the RFC 3164, RFC 5424 and auto-detect parsers."""
from __future__ import annotations

from typing import Iterator, Protocol, runtime_checkable

from ..message import Message


@runtime_checkable
class MessageParser(Protocol):
    """Protocol for syslog line parsers. Duck-typed, no inheritance required."""

    def parse_line(self, line: str) -> Message | None:
        """Parse a single line. Returns None for blank lines; raises SyslogError."""
        ...

    def parse_file(self, path: str) -> Iterator[Message]:
        """Stream-parse a file line by line."""
        ...

    @property
    def name(self) -> str:
        """Wire format name (e.g. 'rfc3164', 'rfc5424')."""
        ...
