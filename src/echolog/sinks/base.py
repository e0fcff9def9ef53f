"""ConsoleSink protocol: strategy for echo output."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from echolog.records import EchoRecord


@runtime_checkable
class ConsoleSink(Protocol):
    """Writes one echo. Must not raise on odd payloads."""

    def write(self, record: EchoRecord) -> None: ...
