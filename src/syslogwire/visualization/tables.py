"""Rich-powered tables for parsed syslog messages."""
from __future__ import annotations

from typing import Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..codec.pri import Facility, Severity
from ..message import Message

_console = Console()

# Severity → row style, most urgent first.
_SEVERITY_STYLE = {
    Severity.EMERG: "bold red",
    Severity.ALERT: "bold red",
    Severity.CRIT: "bold red",
    Severity.ERR: "red",
    Severity.WARNING: "yellow",
    Severity.NOTICE: "cyan",
    Severity.INFO: "",
    Severity.DEBUG: "dim",
}

MESSAGE_COLUMNS = (
    "protocol", "facility", "severity", "timestamp",
    "hostname", "appname", "procid", "msgid", "structured_data", "msg",
)


def _cell(value: object) -> str:
    if value is None:
        return "-"
    if isinstance(value, (Facility, Severity)):
        return value.name.lower()
    return str(value)


def message_row(message: Message) -> list[str]:
    """Display strings for one message, in ``MESSAGE_COLUMNS`` order."""
    sd = "".join(e.render() for e in message.structured_data)
    return [
        str(message.protocol),
        _cell(message.facility),
        _cell(message.severity),
        _cell(message.timestamp.isoformat() if message.timestamp else None),
        _cell(message.hostname),
        _cell(message.appname),
        _cell(message.procid),
        _cell(message.msgid),
        sd or "-",
        str(message.msg),
    ]


def print_messages_table(
    messages: Sequence[Message],
    title: str = "Syslog messages",
    max_rows: int = 100,
    console: Console | None = None,
) -> None:
    """Render parsed messages as a Rich table.

    Args:
        messages:  Parsed messages.
        title:     Table title shown in the header.
        max_rows:  Hard cap; longer inputs are truncated with a notice.
        console:   Target console (defaults to stdout).
    """
    out = console or _console
    if not messages:
        out.print("[yellow]No messages to display.[/yellow]")
        return

    table = Table(title=title, box=box.ROUNDED, show_lines=False)
    for col in MESSAGE_COLUMNS:
        table.add_column(col, overflow="fold", max_width=60)

    for message in messages[:max_rows]:
        style = _SEVERITY_STYLE.get(message.severity, "") if message.severity is not None else ""
        table.add_row(*(Text(cell) for cell in message_row(message)), style=style)

    out.print(table)
    if len(messages) > max_rows:
        out.print(
            f"[dim]... and {len(messages) - max_rows} more rows (use --limit to adjust)[/dim]"
        )


def print_priority_table(
    priority: int,
    facility: Facility,
    severity: Severity,
    console: Console | None = None,
) -> None:
    """Render one PRI value with its facility and severity."""
    out = console or _console
    table = Table(title=f"<{priority}>", box=box.SIMPLE_HEAVY)
    table.add_column("Field", style="bold")
    table.add_column("Name")
    table.add_column("Code", justify="right", style="cyan")
    table.add_row("facility", facility.name.lower(), str(int(facility)))
    table.add_row("severity", severity.name.lower(), str(int(severity)))
    table.add_row("priority", "", str(priority))
    out.print(table)
