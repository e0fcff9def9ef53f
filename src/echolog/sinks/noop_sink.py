"""No-op sink: keeps echoes off the console entirely."""

from __future__ import annotations

from echolog.records import EchoRecord


class NoOpSink:
    """Discards all echoes."""

    def write(self, record: EchoRecord) -> None:
        pass
