"""Mirrors every echo into the structured diagnostics log.

Opt-in (``EchoConfig.mirror_to_logs``). Uses get_logger() so it follows
whichever LogFormatter is active.
"""

from __future__ import annotations

from typing import Any

from echolog.bus import ECHO_EVENT, EventBus
from echolog.logging import get_logger
from echolog.records import EchoKind, EchoRecord

_LEVELS: dict[EchoKind, str] = {
    EchoKind.LOG: "info",
    EchoKind.WARN: "warning",
    EchoKind.ERROR: "error",
    EchoKind.OBJECT: "info",
    EchoKind.IMAGE: "debug",
    EchoKind.QUESTION: "info",
}


def _get_logger():
    """Lazy logger, always reflects the active formatter."""
    return get_logger("echolog.echoes")


def _fields(record: EchoRecord) -> dict[str, Any]:
    d = record.to_dict()
    if record.kind is EchoKind.IMAGE:
        d["msg"] = "<image>"
    return d


def register_log_subscriber(bus: EventBus) -> Any:
    """Subscribe to "echo-event"; returns the bus handle for unsubscribe()."""

    def _log_echo(record: Any = None, *_: Any) -> None:
        if not isinstance(record, EchoRecord):
            return
        level = _LEVELS.get(record.kind, "info")
        getattr(_get_logger(), level)(f"echo.{record.kind.value}", **_fields(record))

    return bus.subscribe(ECHO_EVENT, _log_echo)
