"""Zero-copy text views for messages that borrow from their input line."""
from __future__ import annotations

from typing import Union


class Span:
    """A slice ``source[start:end]`` that is only materialised on demand.

    Spans compare (and hash) by their text, so a borrowed field is equal to
    the ``str`` holding the same characters.
    """

    __slots__ = ("source", "start", "end")

    def __init__(self, source: str, start: int, end: int) -> None:
        if not 0 <= start <= end <= len(source):
            raise IndexError(f"span {start}:{end} outside source of length {len(source)}")
        self.source = source
        self.start = start
        self.end = end

    def __str__(self) -> str:
        return self.source[self.start:self.end]

    def __len__(self) -> int:
        return self.end - self.start

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Span):
            return str(self) == str(other)
        if isinstance(other, str):
            return str(self) == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))

    def __repr__(self) -> str:
        return f"Span({str(self)!r}, {self.start}, {self.end})"


Text = Union[str, Span]


def take(source: str, start: int, end: int, borrow: bool) -> Text:
    """Return ``source[start:end]`` as a Span when borrowing, else as a copy."""
    if borrow:
        return Span(source, start, end)
    return source[start:end]


def owned(value: Text | None) -> str | None:
    """Deep-copy an optional text field into a plain ``str``."""
    return None if value is None else str(value)
