"""Tests for Message rendering, equality and ownership conversion."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from syslogwire.codec.pri import Facility, Severity
from syslogwire.codec.structured_data import StructuredElement
from syslogwire.errors import MalformedStructuredData
from syslogwire.message import Header, Legacy, Message, Structured
from syslogwire.parsers import rfc3164, rfc5424
from syslogwire.text import Span

TS = datetime(2019, 10, 11, 22, 14, 15, tzinfo=timezone.utc)
FROZEN = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _clock() -> datetime:
    return FROZEN


def _structured(**overrides) -> Message:
    fields = dict(
        msg="an application event",
        protocol=Structured(1),
        facility=Facility.LOCAL4,
        severity=Severity.NOTICE,
        timestamp=datetime(2003, 10, 11, 22, 14, 15, 3000, tzinfo=timezone(timedelta(hours=-7))),
        hostname="mymachine.example.com",
        appname="evntslog",
        procid="8710",
        msgid="ID47",
        structured_data=(
            StructuredElement(id="exampleSDID@32473", params=(("iut", "3"), ("eventSource", "App"))),
            StructuredElement(id="quote@1", params=(("v", 'say "hi" [x] \\o/'),)),
        ),
    )
    fields.update(overrides)
    return Message(**fields)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

class TestRender:
    def test_structured_line(self) -> None:
        message = _structured(structured_data=(), procid=None)
        assert message.render() == (
            "<165>1 2003-10-11T22:14:15.003000-07:00 mymachine.example.com "
            "evntslog - ID47 - an application event"
        )

    def test_structured_data_rendered_and_escaped(self) -> None:
        line = _structured().render()
        assert '[exampleSDID@32473 iut="3" eventSource="App"][quote@1 v="say \\"hi\\" [x\\] \\\\o/"]' in line

    def test_nil_marker_only_for_structured(self) -> None:
        structured = Message(msg="body", protocol=Structured(1), timestamp=TS)
        legacy = Message(msg="body", protocol=Legacy(), timestamp=TS)
        assert structured.render() == "<47>1 2019-10-11T22:14:15+00:00 - - - - - body"
        assert legacy.render() == "<47> 2019-10-11T22:14:15+00:00 - - - -  body"

    def test_legacy_line(self) -> None:
        message = Message(
            msg="a message",
            protocol=Legacy(),
            facility=Facility.AUTH,
            severity=Severity.CRIT,
            timestamp=TS,
            hostname="mymachine",
            appname="su",
        )
        assert str(message) == "<34> 2019-10-11T22:14:15+00:00 mymachine su - -  a message"

    def test_defaults_do_not_leak_into_message(self) -> None:
        message = Message(msg="x", timestamp=TS)
        assert message.render().startswith("<47>1 ")
        assert message.facility is None
        assert message.severity is None
        assert message.priority is None

    def test_missing_timestamp_uses_clock(self) -> None:
        message = Message(msg="x", facility=Facility.USER, severity=Severity.INFO)
        assert message.render(clock=_clock) == "<14>1 2024-01-02T03:04:05+00:00 - - - - - x"
        assert message.timestamp is None

    def test_missing_timestamp_defaults_to_now(self) -> None:
        before = datetime.now(timezone.utc).replace(microsecond=0)
        line = Message(msg="x").render()
        stamp = datetime.fromisoformat(line.split(" ")[1])
        assert stamp >= before

    def test_priority_property(self) -> None:
        assert _structured().priority == 165


# ---------------------------------------------------------------------------
# Round trips
# ---------------------------------------------------------------------------

class TestRoundTrip:
    def test_structured_round_trip(self) -> None:
        message = _structured()
        assert rfc5424.parse_message(message.render()) == message

    @pytest.mark.parametrize("overrides", [
        {"hostname": None, "appname": None, "procid": None, "msgid": None},
        {"structured_data": ()},
        {"msg": ""},
        {"msg": "  leading and trailing  "},
        {"msg": "[not sd] - ok"},
        {"protocol": Structured(2)},
        {"timestamp": TS},
    ])
    def test_structured_round_trip_variants(self, overrides) -> None:
        message = _structured(**overrides)
        parsed = rfc5424.parse_message(message.render())
        assert parsed == message
        assert parsed.protocol == message.protocol

    def test_wire_line_round_trip(self, rfc5424_lines) -> None:
        for line in rfc5424_lines[2:]:
            assert rfc5424.parse_message(rfc5424.parse_message(line).render()) == rfc5424.parse_message(line)


# ---------------------------------------------------------------------------
# Equality and construction
# ---------------------------------------------------------------------------

class TestEquality:
    def test_protocol_is_ignored(self) -> None:
        a = _structured(structured_data=())
        b = _structured(structured_data=(), protocol=Legacy())
        assert a == b
        assert a.protocol != b.protocol

    def test_structured_data_order_matters(self) -> None:
        message = _structured()
        reordered = _structured(structured_data=tuple(reversed(message.structured_data)))
        assert message != reordered

    def test_structured_data_accepts_lists(self) -> None:
        element = StructuredElement(id="a")
        assert Message(msg="x", structured_data=[element]).structured_data == (element,)

    def test_each_field_participates(self) -> None:
        base = _structured()
        for name, value in [
            ("msg", "other"), ("facility", Facility.KERN), ("severity", Severity.EMERG),
            ("timestamp", TS), ("hostname", "h"), ("appname", "a"),
            ("procid", "p"), ("msgid", "m"), ("structured_data", ()),
        ]:
            assert _structured(**{name: value}) != base, name

    def test_messages_are_hashable(self) -> None:
        assert len({_structured(structured_data=()), _structured(structured_data=(), protocol=Legacy())}) == 1


class TestConstruction:
    def test_from_header_structured(self) -> None:
        header = Header(facility=Facility.AUTH, severity=Severity.CRIT, hostname="h", version=1)
        element = StructuredElement(id="a")
        message = Message.from_header(header, [element], "body")
        assert message.protocol == Structured(1)
        assert message.hostname == "h"
        assert message.structured_data == (element,)
        assert message.header == header

    def test_from_header_legacy(self) -> None:
        header = Header(facility=Facility.AUTH, severity=Severity.CRIT, timestamp=TS)
        message = Message.from_header(header, msg="x")
        assert message.protocol == Legacy()
        assert message.header.version is None

    def test_legacy_rejects_structured_data(self) -> None:
        with pytest.raises(MalformedStructuredData):
            Message(msg="x", protocol=Legacy(), structured_data=(StructuredElement(id="a"),))

    def test_legacy_from_header_rejects_structured_data(self) -> None:
        header = Header(facility=Facility.AUTH, severity=Severity.CRIT, timestamp=TS)
        with pytest.raises(MalformedStructuredData):
            Message.from_header(header, [StructuredElement(id="a")], "x")

    def test_as_dict(self) -> None:
        data = _structured().as_dict()
        assert data["protocol"] == "rfc5424 (v1)"
        assert data["facility"] == "local4"
        assert data["severity"] == "notice"
        assert data["timestamp"] == "2003-10-11T22:14:15.003000-07:00"
        assert data["structured_data"][0] == {
            "id": "exampleSDID@32473",
            "params": [["iut", "3"], ["eventSource", "App"]],
        }


class TestOwnership:
    def test_to_owned_copies_every_text_field(self, rfc5424_lines) -> None:
        line = rfc5424_lines[2]
        borrowed = rfc5424.parse_message(line, borrow=True)
        owned = borrowed.to_owned()
        for name in ("hostname", "appname", "msgid", "msg"):
            assert isinstance(getattr(borrowed, name), Span)
            assert type(getattr(owned, name)) is str
        for element in owned.structured_data:
            assert type(element.id) is str
            assert all(type(n) is str and type(v) is str for n, v in element.params)
        assert owned.procid is None
        assert owned == borrowed
        assert owned.protocol == borrowed.protocol

    def test_borrowed_legacy_message(self, year_2019) -> None:
        line = "<34>Oct 11 22:14:15 mymachine su: a message"
        borrowed = rfc3164.parse_message(line, year_2019, borrow=True)
        assert isinstance(borrowed.hostname, Span)
        assert (borrowed.hostname.start, borrowed.hostname.end) == (20, 29)
        assert borrowed.to_owned() == rfc3164.parse_message(line, year_2019)

    def test_render_is_identical_for_both_forms(self, rfc5424_lines) -> None:
        line = rfc5424_lines[2]
        borrowed = rfc5424.parse_message(line, borrow=True)
        assert borrowed.render() == borrowed.to_owned().render()
