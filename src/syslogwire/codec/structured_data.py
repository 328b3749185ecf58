"""RFC 5424 STRUCTURED-DATA grammar.

    SD-ELEMENT := "[" SD-ID *(SP SD-PARAM) "]"
    SD-PARAM   := PARAM-NAME "=" DQUOTE PARAM-VALUE DQUOTE

SD-ID and PARAM-NAME may not contain SP, ``=``, ``]`` or ``"``. Inside
PARAM-VALUE the sequences ``\\"``, ``\\\\`` and ``\\]`` are escapes; any
other backslash is literal. Elements follow each other with no separator,
and a message without any is written as the nil value ``-``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, Iterable, TypeVar

from ..errors import MalformedStructuredData
from ..text import Span, Text, take

NILVALUE = "-"

_FORBIDDEN = frozenset(' =]"')
_ESCAPABLE = frozenset('"\\]')

S = TypeVar("S", str, Span)


def _check_name(kind: str, name: str) -> None:
    if not name:
        raise MalformedStructuredData(f"empty {kind}")
    bad = _FORBIDDEN.intersection(name)
    if bad:
        raise MalformedStructuredData(
            f"{kind} {name!r} contains forbidden character(s) {''.join(sorted(bad))!r}"
        )


def escape_param_value(value: str) -> str:
    """Escape ``\\``, ``"`` and ``]`` for the wire. Always applied."""
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("]", "\\]")


def unescape_param_value(wire: str) -> str:
    """Undo ``escape_param_value``; unknown backslash sequences stay literal."""
    out: list[str] = []
    i = 0
    n = len(wire)
    while i < n:
        ch = wire[i]
        if ch == "\\" and i + 1 < n and wire[i + 1] in _ESCAPABLE:
            out.append(wire[i + 1])
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


@dataclass(frozen=True)
class StructuredElement(Generic[S]):
    """One ``[id name="value" ...]`` element.

    ``params`` keeps wire order; equality is order-sensitive.
    """

    id: S
    params: tuple[tuple[S, Text], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any iterable of pairs but store an immutable tuple.
        object.__setattr__(self, "params", tuple((n, v) for n, v in self.params))
        _check_name("SD-ID", str(self.id))
        for name, _ in self.params:
            _check_name("PARAM-NAME", str(name))

    def get(self, name: str, default: str | None = None) -> str | None:
        """Value of the first parameter called ``name``."""
        for key, value in self.params:
            if key == name:
                return str(value)
        return default

    def render(self) -> str:
        parts = [f"[{self.id}"]
        for name, value in self.params:
            parts.append(f' {name}="{escape_param_value(str(value))}"')
        parts.append("]")
        return "".join(parts)

    def to_owned(self) -> StructuredElement[str]:
        return StructuredElement(
            id=str(self.id),
            params=tuple((str(n), str(v)) for n, v in self.params),
        )

    def __str__(self) -> str:
        return self.render()


def render_structured_data(
    elements: Iterable[StructuredElement], nil: str = NILVALUE
) -> str:
    """Concatenate rendered elements, or return ``nil`` when there are none."""
    rendered = "".join(e.render() for e in elements)
    return rendered or nil


def _read_name(text: str, pos: int, kind: str, stop: str) -> int:
    """Scan a SD-ID / PARAM-NAME from ``pos`` up to one of ``stop``."""
    n = len(text)
    i = pos
    while i < n and text[i] not in stop:
        if text[i] in _FORBIDDEN:
            raise MalformedStructuredData(
                f"{kind} contains forbidden character {text[i]!r} at offset {i}"
            )
        i += 1
    if i == n:
        raise MalformedStructuredData(f"unterminated element, {kind} runs to end of input")
    if i == pos:
        raise MalformedStructuredData(f"empty {kind} at offset {pos}")
    return i


def _read_value(text: str, pos: int, borrow: bool) -> tuple[Text, int]:
    """Scan a quoted PARAM-VALUE whose opening quote is at ``pos - 1``.

    Returns the unescaped value and the offset after the closing quote.
    Values that contained escapes are always returned as ``str``.
    """
    n = len(text)
    i = pos
    escaped = False
    while i < n:
        ch = text[i]
        if ch == "\\" and i + 1 < n and text[i + 1] in _ESCAPABLE:
            escaped = True
            i += 2
            continue
        if ch == '"':
            if escaped:
                return unescape_param_value(text[pos:i]), i + 1
            return take(text, pos, i, borrow), i + 1
        i += 1
    raise MalformedStructuredData(f"unterminated quoted value starting at offset {pos}")


def parse_element(text: str, pos: int = 0, borrow: bool = False) -> tuple[StructuredElement, int]:
    """Parse one ``[...]`` element starting at ``pos``."""
    if not text.startswith("[", pos):
        raise MalformedStructuredData(f"expected '[' at offset {pos}")
    start = pos + 1
    end = _read_name(text, start, "SD-ID", " ]")
    sd_id = take(text, start, end, borrow)
    params: list[tuple[Text, Text]] = []
    i = end
    n = len(text)
    while True:
        if i >= n:
            raise MalformedStructuredData("unterminated element, missing ']'")
        if text[i] == "]":
            return StructuredElement(id=sd_id, params=tuple(params)), i + 1
        # text[i] is a space here
        while i < n and text[i] == " ":
            i += 1
        if i < n and text[i] == "]":
            continue
        name_end = _read_name(text, i, "PARAM-NAME", "=")
        name = take(text, i, name_end, borrow)
        if not text.startswith('"', name_end + 1):
            raise MalformedStructuredData(f"expected '\"' after {str(name)!r}=")
        value, i = _read_value(text, name_end + 2, borrow)
        params.append((name, value))
        if i < n and text[i] not in " ]":
            raise MalformedStructuredData(
                f"expected ' ' or ']' after value of {str(name)!r} at offset {i}"
            )


def parse_structured_data(
    text: str, pos: int = 0, borrow: bool = False
) -> tuple[tuple[StructuredElement, ...], int]:
    """Parse the STRUCTURED-DATA field starting at ``pos``.

    Returns the (possibly empty) tuple of elements and the offset just past
    the field. The nil value ``-`` yields an empty tuple.
    """
    if text.startswith(NILVALUE, pos):
        return (), pos + 1
    if not text.startswith("[", pos):
        raise MalformedStructuredData(f"expected '[' or '-' at offset {pos}")
    elements: list[StructuredElement] = []
    while text.startswith("[", pos):
        element, pos = parse_element(text, pos, borrow)
        elements.append(element)
    return tuple(elements), pos
