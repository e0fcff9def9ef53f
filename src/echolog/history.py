"""EchoLog: append-only, in-memory history of echo records."""

from __future__ import annotations

import threading
from collections.abc import Iterator

from echolog.records import EchoKind, EchoRecord


class EchoLog:
    """Append-only record history. Records are never removed or reordered.

    Owned by a single ``Echo`` instance (or shared explicitly by the caller).
    Appends are lock-guarded so bus callbacks on foreign threads can't
    interleave with the event loop.
    """

    def __init__(self) -> None:
        self._records: list[EchoRecord] = []
        self._lock = threading.Lock()

    def append(self, record: EchoRecord) -> None:
        with self._lock:
            self._records.append(record)

    def snapshot(self) -> tuple[EchoRecord, ...]:
        with self._lock:
            return tuple(self._records)

    def of_kind(self, kind: EchoKind) -> tuple[EchoRecord, ...]:
        return tuple(r for r in self.snapshot() if r.kind is kind)

    def last(self) -> EchoRecord | None:
        with self._lock:
            return self._records[-1] if self._records else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __iter__(self) -> Iterator[EchoRecord]:
        return iter(self.snapshot())

    def __getitem__(self, index: int) -> EchoRecord:
        with self._lock:
            return self._records[index]

    def __repr__(self) -> str:
        return f"EchoLog(records={len(self)})"
