"""syslogwire CLI entry point.

Commands:
    syslogwire parse  <file>      Parse syslog lines and display their fields
    syslogwire render <msg>       Build a message and print its wire line
    syslogwire pri    [<value>]   Decode or encode a PRI value
"""
from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console

from .codec.pri import Facility, Severity, decode_pri, encode_pri, parse_pri
from .codec.structured_data import StructuredElement
from .config import settings
from .errors import SyslogError
from .message import Legacy, Message, Structured
from .parsers.auto_detect import FORMATS, AutoDetectParser
from .years import fixed_year
from .visualization.tables import print_messages_table, print_priority_table

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

_FACILITY_NAMES = [f.name.lower() for f in Facility]
_SEVERITY_NAMES = [s.name.lower() for s in Severity]


# ── CLI root ─────────────────────────────────────────────────────────────────


@click.group()
@click.version_option(version="1.0.0", prog_name="syslogwire")
def main() -> None:
    """syslogwire: parse and render RFC 3164 / RFC 5424 syslog lines."""
    logging.basicConfig(level=settings.log_level.upper())


# ── parse ────────────────────────────────────────────────────────────────────


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--format", "-f", "fmt", default=settings.default_format,
    type=click.Choice(list(FORMATS), case_sensitive=False),
    help="Input wire format (default: detect per line).",
    show_default=True,
)
@click.option(
    "--output", "-o", "output_fmt", default="table",
    type=click.Choice(["table", "stream", "json"], case_sensitive=False),
    help="Output format.",
    show_default=True,
)
@click.option("--limit", "-n", default=0, type=int, help="Max messages to display (0 = all).")
@click.option("--year", type=int, default=None, help="Year for RFC 3164 timestamps (default: from config).")
def parse(file: Path, fmt: str, output_fmt: str, limit: int, year: int | None) -> None:
    """Parse a file of syslog lines and display the decoded fields.

    Lines that fail to parse are skipped and counted.

    \b
    Examples:
      syslogwire parse /var/log/messages
      syslogwire parse collector.log --format rfc5424 --output json
      syslogwire parse old.log --year 2019 --output stream
    """
    resolve_year = fixed_year(year) if year is not None else settings.year_strategy()
    parser = AutoDetectParser(resolve_year, hint=fmt.lower(), borrow=settings.borrow_text)

    messages: list[Message] = []
    failed = 0
    with file.open(encoding="utf-8", errors="replace") as fh:
        for line_num, line in enumerate(fh, 1):
            if limit and len(messages) >= limit:
                break
            try:
                message = parser.parse_line(line)
            except SyslogError as exc:
                failed += 1
                logger.warning("%s:%d: %s", file.name, line_num, exc)
                continue
            if message is not None:
                messages.append(message)

    if output_fmt == "json":
        for message in messages:
            click.echo(json.dumps(message.as_dict()))
    elif output_fmt == "stream":
        for message in messages:
            click.echo(message.render())
    else:
        print_messages_table(messages, title=file.name, max_rows=limit or len(messages) or 1)

    err_console.print(f"[dim]Parsed {len(messages)} messages from {file.name}[/dim]")
    if failed:
        err_console.print(f"[yellow]{failed} line(s) could not be parsed[/yellow]")


# ── render ───────────────────────────────────────────────────────────────────


def _parse_sd(values: tuple[str, ...]) -> list[StructuredElement]:
    elements = []
    for entry in values:
        if not entry.strip():
            raise click.BadParameter("empty structured-data element", param_hint="--sd")
        sd_id, *pairs = entry.split()
        params = []
        for pair in pairs:
            name, sep, value = pair.partition("=")
            if not sep:
                raise click.BadParameter(f"expected NAME=VALUE, got {pair!r}", param_hint="--sd")
            params.append((name, value))
        elements.append(StructuredElement(id=sd_id, params=tuple(params)))
    return elements


@main.command()
@click.argument("msg")
@click.option(
    "--facility", type=click.Choice(_FACILITY_NAMES, case_sensitive=False), default=None,
    help="Facility name (rendered as 'syslog' when omitted).",
)
@click.option(
    "--severity", type=click.Choice(_SEVERITY_NAMES, case_sensitive=False), default=None,
    help="Severity name (rendered as 'debug' when omitted).",
)
@click.option("--rfc3164", "legacy", is_flag=True, help="Render the legacy BSD format.")
@click.option("--protocol-version", "version", default=1, type=int, show_default=True, help="RFC 5424 VERSION field.")
@click.option("--timestamp", default=None, help="ISO-8601 timestamp with offset (default: now).")
@click.option("--hostname", default=None)
@click.option("--appname", default=None)
@click.option("--procid", default=None)
@click.option("--msgid", default=None)
@click.option(
    "--sd", "sd", multiple=True,
    help='Structured-data element, e.g. --sd "origin@32473 ip=10.0.0.1 software=app".',
)
def render(
    msg: str,
    facility: str | None,
    severity: str | None,
    legacy: bool,
    version: int,
    timestamp: str | None,
    hostname: str | None,
    appname: str | None,
    procid: str | None,
    msgid: str | None,
    sd: tuple[str, ...],
) -> None:
    """Build a message from options and print its wire line.

    \b
    Examples:
      syslogwire render "disk full" --facility daemon --severity err --hostname web1
      syslogwire render "login" --sd "origin@32473 ip=10.0.0.1" --appname sshd
      syslogwire render "hello" --rfc3164 --facility user --severity notice
    """
    ts = None
    if timestamp:
        try:
            ts = datetime.fromisoformat(timestamp)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--timestamp") from exc
        if ts.tzinfo is None:
            raise click.BadParameter("timestamp needs a UTC offset", param_hint="--timestamp")

    try:
        elements = _parse_sd(sd)
    except SyslogError as exc:
        raise click.BadParameter(str(exc), param_hint="--sd") from exc
    if legacy and elements:
        raise click.UsageError("--sd cannot be combined with --rfc3164")

    message = Message(
        msg=msg,
        protocol=Legacy() if legacy else Structured(version),
        facility=Facility[facility.upper()] if facility else None,
        severity=Severity[severity.upper()] if severity else None,
        timestamp=ts,
        hostname=hostname,
        appname=appname,
        procid=None if legacy else procid,
        msgid=None if legacy else msgid,
        structured_data=elements,
    )
    click.echo(message.render())


# ── pri ──────────────────────────────────────────────────────────────────────


@main.command()
@click.argument("value", required=False)
@click.option("--facility", type=click.Choice(_FACILITY_NAMES, case_sensitive=False), default=None)
@click.option("--severity", type=click.Choice(_SEVERITY_NAMES, case_sensitive=False), default=None)
def pri(value: str | None, facility: str | None, severity: str | None) -> None:
    """Decode a PRI value (``34`` or ``<34>``) or encode facility + severity.

    \b
    Examples:
      syslogwire pri 34
      syslogwire pri "<165>"
      syslogwire pri --facility local4 --severity notice
    """
    if value is None:
        if facility is None or severity is None:
            raise click.UsageError("give a VALUE, or both --facility and --severity")
        fac, sev = Facility[facility.upper()], Severity[severity.upper()]
        print_priority_table(encode_pri(fac, sev), fac, sev, console=console)
        return

    try:
        if value.startswith("<"):
            fac, sev, end = parse_pri(value)
            if end != len(value):
                raise click.BadParameter(f"trailing text after {value[:end]!r}", param_hint="VALUE")
        elif value.isascii() and value.isdigit():
            fac, sev = decode_pri(int(value))
        else:
            raise click.BadParameter(f"{value!r} is not a priority", param_hint="VALUE")
    except SyslogError as exc:
        raise click.BadParameter(str(exc), param_hint="VALUE") from exc
    print_priority_table(encode_pri(fac, sev), fac, sev, console=console)


if __name__ == "__main__":
    main()
