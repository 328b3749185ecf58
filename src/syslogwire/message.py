"""Unified syslog message model for RFC 3164 and RFC 5424.

A ``Message`` is generic over how it holds text:

* ``Message[str]``  owns every field.
* ``Message[Span]`` borrows slices of the line it was parsed from.

``Message.to_owned()`` converts the second form into the first.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Generic, Iterable, TypeVar, Union

from .codec.pri import Facility, Severity, encode_pri
from .codec.structured_data import NILVALUE, StructuredElement
from .codec.timestamp import format_timestamp
from .errors import MalformedStructuredData
from .text import Span, owned

S = TypeVar("S", str, Span)

Clock = Callable[[], datetime]

# Substituted only while rendering; never stored on a message.
DEFAULT_FACILITY = Facility.SYSLOG
DEFAULT_SEVERITY = Severity.DEBUG


@dataclass(frozen=True)
class Legacy:
    """RFC 3164 (BSD) wire format."""

    version = None

    def __str__(self) -> str:
        return "rfc3164"


@dataclass(frozen=True)
class Structured:
    """RFC 5424 wire format with its VERSION field."""

    version: int = 1

    def __str__(self) -> str:
        return f"rfc5424 (v{self.version})"


ProtocolTag = Union[Legacy, Structured]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Header(Generic[S]):
    """Decoded header fields; ``version`` is ``None`` for RFC 3164."""

    facility: Facility | None = None
    severity: Severity | None = None
    timestamp: datetime | None = None
    hostname: S | None = None
    appname: S | None = None
    procid: S | None = None
    msgid: S | None = None
    version: int | None = None


@dataclass(frozen=True)
class Message(Generic[S]):
    """A complete syslog message.

    Equality compares every field except ``protocol``: an RFC 3164 message
    and an RFC 5424 message carrying the same values are equal. Compare
    ``protocol`` explicitly when the wire format matters.

    RFC 3164 has no STRUCTURED-DATA field, so a ``Legacy`` message with
    elements raises ``MalformedStructuredData``.
    """

    msg: S
    protocol: ProtocolTag = field(default_factory=Structured, compare=False)
    facility: Facility | None = None
    severity: Severity | None = None
    timestamp: datetime | None = None
    hostname: S | None = None
    appname: S | None = None
    procid: S | None = None
    msgid: S | None = None
    structured_data: tuple[StructuredElement, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "structured_data", tuple(self.structured_data))
        if self.structured_data and isinstance(self.protocol, Legacy):
            raise MalformedStructuredData("RFC 3164 messages cannot carry structured data")

    @classmethod
    def from_header(
        cls,
        header: Header,
        structured_data: Iterable[StructuredElement] = (),
        msg: S = "",
    ) -> Message:
        protocol: ProtocolTag = (
            Legacy() if header.version is None else Structured(header.version)
        )
        return cls(
            msg=msg,
            protocol=protocol,
            facility=header.facility,
            severity=header.severity,
            timestamp=header.timestamp,
            hostname=header.hostname,
            appname=header.appname,
            procid=header.procid,
            msgid=header.msgid,
            structured_data=tuple(structured_data),
        )

    @property
    def header(self) -> Header:
        return Header(
            facility=self.facility,
            severity=self.severity,
            timestamp=self.timestamp,
            hostname=self.hostname,
            appname=self.appname,
            procid=self.procid,
            msgid=self.msgid,
            version=self.protocol.version,
        )

    @property
    def priority(self) -> int | None:
        """Encoded PRI, or ``None`` when facility or severity is unset."""
        if self.facility is None or self.severity is None:
            return None
        return encode_pri(self.facility, self.severity)

    def to_owned(self) -> Message[str]:
        """Copy every borrowed field into an independent ``Message[str]``."""
        return Message(
            msg=str(self.msg),
            protocol=self.protocol,
            facility=self.facility,
            severity=self.severity,
            timestamp=self.timestamp,
            hostname=owned(self.hostname),
            appname=owned(self.appname),
            procid=owned(self.procid),
            msgid=owned(self.msgid),
            structured_data=tuple(e.to_owned() for e in self.structured_data),
        )

    def as_dict(self) -> dict[str, Any]:
        """JSON-friendly view; enum fields use their lower-case names."""
        return {
            "protocol": str(self.protocol),
            "facility": self.facility.name.lower() if self.facility is not None else None,
            "severity": self.severity.name.lower() if self.severity is not None else None,
            "timestamp": self.timestamp.isoformat() if self.timestamp is not None else None,
            "hostname": owned(self.hostname),
            "appname": owned(self.appname),
            "procid": owned(self.procid),
            "msgid": owned(self.msgid),
            "structured_data": [
                {"id": str(e.id), "params": [[str(n), str(v)] for n, v in e.params]}
                for e in self.structured_data
            ],
            "msg": str(self.msg),
        }

    def render(self, clock: Clock | None = None) -> str:
        """Render the wire line.

        Missing facility/severity render as syslog/debug and a missing
        timestamp as the current time from ``clock`` (UTC wall clock by
        default). None of these substitutes are written back.
        """
        pri = encode_pri(
            self.facility if self.facility is not None else DEFAULT_FACILITY,
            self.severity if self.severity is not None else DEFAULT_SEVERITY,
        )
        version = "" if self.protocol.version is None else str(self.protocol.version)
        timestamp = self.timestamp if self.timestamp is not None else (clock or utcnow)()

        if self.structured_data:
            sd = "".join(e.render() for e in self.structured_data)
        elif isinstance(self.protocol, Structured):
            sd = NILVALUE
        else:
            sd = ""

        fields = [
            f"<{pri}>{version}",
            format_timestamp(timestamp),
            _nil(self.hostname),
            _nil(self.appname),
            _nil(self.procid),
            _nil(self.msgid),
            sd,
            str(self.msg),
        ]
        return " ".join(fields)

    def __str__(self) -> str:
        return self.render()


def _nil(value: str | Span | None) -> str:
    return NILVALUE if value is None else str(value)
