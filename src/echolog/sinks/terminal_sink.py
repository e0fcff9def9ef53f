"""Terminal sink: one colored line per echo, or a full JSON dump."""

from __future__ import annotations

import json
from typing import IO, Any

import typer

from echolog.records import (
    BlobPayload,
    EchoKind,
    EchoRecord,
    ErrorPayload,
    StructuredPayload,
    TextPayload,
)

_COLORS: dict[EchoKind, str] = {
    EchoKind.LOG: typer.colors.BRIGHT_GREEN,
    EchoKind.WARN: typer.colors.YELLOW,
    EchoKind.ERROR: typer.colors.BRIGHT_RED,
    EchoKind.OBJECT: typer.colors.BRIGHT_BLUE,
    EchoKind.IMAGE: typer.colors.BRIGHT_BLACK,
    EchoKind.QUESTION: typer.colors.GREEN,
}

UNKNOWN_SENDER = "unknown"


def format_time(record: EchoRecord) -> str:
    """Local time as ``19.Oct.2026 14:03:07.120``."""
    local = record.timestamp.astimezone()
    return local.strftime("%d.%b.%Y %H:%M:%S.") + f"{local.microsecond // 1000:03d}"


def _fallback(value: Any) -> str:
    try:
        return repr(value)
    except Exception:
        return f"<{type(value).__name__}>"


def render_payload(record: EchoRecord) -> str:
    payload = record.payload
    if isinstance(payload, TextPayload):
        return payload.text
    if isinstance(payload, StructuredPayload):
        try:
            return json.dumps(payload.value, indent=2, default=str, ensure_ascii=False)
        except (TypeError, ValueError):
            return _fallback(payload.value)
    if isinstance(payload, ErrorPayload):
        return payload.message
    if isinstance(payload, BlobPayload):
        if isinstance(payload.data, (bytes, bytearray)):
            return f"<image {len(payload.data)} bytes>"
        return str(payload.data)
    return _fallback(payload)


def render_compact(record: EchoRecord) -> str:
    sender = record.sender or UNKNOWN_SENDER
    return f"[{sender}] ({format_time(record)}) {render_payload(record)}"


def render_full(record: EchoRecord) -> str:
    return json.dumps(record.to_dict(), indent=2, default=_fallback, ensure_ascii=False)


class TerminalSink:
    """Writes echoes to a text stream (stdout by default).

    compact=True prints ``[sender] (time) payload``; an empty log echo is a
    bare blank line. compact=False prints the whole record as JSON.
    """

    def __init__(
        self, compact: bool = True, stream: IO[str] | None = None, color: bool = True
    ) -> None:
        self.compact = compact
        self._stream = stream
        self._color = color

    def write(self, record: EchoRecord) -> None:
        if self.compact and record.kind is EchoKind.LOG and record.payload == TextPayload(""):
            typer.echo("", file=self._stream)
            return

        try:
            line = render_compact(record) if self.compact else render_full(record)
        except Exception:
            line = _fallback(record)

        if self._color:
            line = typer.style(line, fg=_COLORS.get(record.kind, typer.colors.WHITE))
        typer.echo(line, file=self._stream)
