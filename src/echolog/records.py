"""Echo records: the immutable unit every emit operation produces.

All records and payloads are frozen dataclasses. The payload is a tagged
variant; ``EchoKind`` decides which variant a record carries, so sinks and
subscribers can match on the payload type exhaustively.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class EchoKind(str, Enum):
    """Closed set of echo kinds. Values match the ``method`` wire field."""

    LOG = "log"
    WARN = "warn"
    ERROR = "error"
    OBJECT = "objekt"
    IMAGE = "image"
    QUESTION = "question"


# ---------------------------------------------------------------------------
# Payload variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextPayload:
    text: str

    def to_wire(self) -> Any:
        return self.text


@dataclass(frozen=True)
class StructuredPayload:
    value: Any  # mapping, sequence or scalar; passed through unrendered

    def to_wire(self) -> Any:
        return self.value


@dataclass(frozen=True)
class ErrorPayload:
    message: str
    stack: str | None = None

    def to_wire(self) -> Any:
        return {"message": self.message, "stack": self.stack}


@dataclass(frozen=True)
class BlobPayload:
    data: Any  # opaque encoded image, never decoded

    def to_wire(self) -> Any:
        return self.data


Payload = TextPayload | StructuredPayload | ErrorPayload | BlobPayload

_PAYLOAD_FOR_KIND: dict[EchoKind, type] = {
    EchoKind.LOG: TextPayload,
    EchoKind.WARN: TextPayload,
    EchoKind.QUESTION: TextPayload,
    EchoKind.OBJECT: StructuredPayload,
    EchoKind.ERROR: ErrorPayload,
    EchoKind.IMAGE: BlobPayload,
}


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class EchoClock:
    """Wall clock that never goes backwards within a process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last: datetime | None = None

    def now(self) -> datetime:
        current = datetime.now(UTC)
        with self._lock:
            if self._last is not None and current < self._last:
                current = self._last
            self._last = current
        return current


_clock = EchoClock()


def now() -> datetime:
    return _clock.now()


def format_iso(ts: datetime) -> str:
    """ISO-8601 with millisecond precision and a ``Z`` suffix."""
    return ts.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class EchoRecord:
    sender: str
    payload: Payload
    kind: EchoKind
    timestamp: datetime = field(default_factory=now)

    def __post_init__(self) -> None:
        expected = _PAYLOAD_FOR_KIND[self.kind]
        if not isinstance(self.payload, expected):
            raise TypeError(
                f"{self.kind.value!r} echo requires {expected.__name__}, "
                f"got {type(self.payload).__name__}"
            )

    @property
    def time(self) -> str:
        return format_iso(self.timestamp)

    def to_dict(self) -> dict[str, Any]:
        """Wire shape published to listeners and used for full console dumps."""
        return {
            "who": self.sender,
            "msg": self.payload.to_wire(),
            "method": self.kind.value,
            "time": self.time,
        }
