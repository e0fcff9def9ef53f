"""Echo: the logging facade.

Every emit builds an EchoRecord, appends it to the instance's EchoLog,
writes it to the sink and publishes it on "echo-event". Non-question emits
then wait ``pace_ms`` so bursts can't flood the console. ``question()``
skips the pacing and waits for an answer instead.

    echo = Echo(sender_id="user1", bus=bus)
    await echo.log("App started")
    answer = await echo.question("Continue (yes/no)?")

    # elsewhere, on the same bus
    bus.publish("echo-answer", "user1", "Continue (yes/no)?", "yes")
"""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any

from echolog.bus import ECHO_ANSWER, ECHO_EVENT, EventBus, PyventusBus
from echolog.config import DEFAULT_ANSWER_TIMEOUT_MS, EchoConfig
from echolog.correlation import CorrelationEngine
from echolog.history import EchoLog
from echolog.logging import get_logger
from echolog.records import (
    BlobPayload,
    EchoKind,
    EchoRecord,
    Payload,
    StructuredPayload,
    TextPayload,
)
from echolog.sinks import ConsoleSink, TerminalSink
from echolog.subscribers import register_log_subscriber
from echolog.text import describe_error, join_values, to_text

DEFAULT_PACE_MS = 100


def _get_logger():
    return get_logger("echolog.facade")


def _question_key(text: Any) -> str:
    return text if isinstance(text, str) else to_text(text)


class Echo:
    """Unified logger for console output and bus listeners.

    Args:
        compact_output: one line per echo instead of a full JSON dump.
        pace_ms: delay after each non-question echo.
        bus: EventBus to publish on and listen for answers. A private
            PyventusBus is created when omitted.
        answer_timeout_ms: how long question() waits. 0/None means default.
        sender_id: identifier stamped on every echo (may be empty).
        sink: where echoes are rendered. Defaults to a TerminalSink.
        history: EchoLog to append to. Defaults to a fresh one.
    """

    def __init__(
        self,
        compact_output: bool = True,
        pace_ms: int = DEFAULT_PACE_MS,
        bus: EventBus | None = None,
        answer_timeout_ms: int | None = DEFAULT_ANSWER_TIMEOUT_MS,
        sender_id: str | None = "",
        *,
        sink: ConsoleSink | None = None,
        history: EchoLog | None = None,
    ) -> None:
        if pace_ms < 0:
            raise ValueError(f"pace_ms must be >= 0, got {pace_ms}")
        answer_timeout_ms = answer_timeout_ms or DEFAULT_ANSWER_TIMEOUT_MS
        if answer_timeout_ms < 0:
            raise ValueError(f"answer_timeout_ms must be >= 0, got {answer_timeout_ms}")

        self.compact_output = compact_output
        self.pace_ms = pace_ms
        self.answer_timeout_ms = answer_timeout_ms
        self.sender_id = sender_id or ""

        self._owns_bus = bus is None
        self.bus: EventBus = bus if bus is not None else PyventusBus()
        self.sink: ConsoleSink = sink if sink is not None else TerminalSink(compact=compact_output)
        self._history = history if history is not None else EchoLog()
        self._engine = CorrelationEngine(self.bus)
        self._tasks: set[asyncio.Task] = set()
        self._mirror: Any = None

    @classmethod
    def from_config(
        cls,
        config: EchoConfig | None = None,
        *,
        bus: EventBus | None = None,
        sink: ConsoleSink | None = None,
        history: EchoLog | None = None,
    ) -> Echo:
        cfg = config or EchoConfig()
        echo = cls(
            compact_output=cfg.compact_output,
            pace_ms=cfg.pace_ms,
            bus=bus,
            answer_timeout_ms=cfg.answer_timeout_ms,
            sender_id=cfg.sender_id,
            sink=sink if sink is not None else TerminalSink(cfg.compact_output, color=cfg.color),
            history=history,
        )
        if cfg.mirror_to_logs:
            echo._mirror = register_log_subscriber(echo.bus)
        return echo

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def history(self) -> EchoLog:
        return self._history

    @property
    def engine(self) -> CorrelationEngine:
        return self._engine

    def all_echoes(self) -> tuple[EchoRecord, ...]:
        return self._history.snapshot()

    # ------------------------------------------------------------------
    # Emit operations
    # ------------------------------------------------------------------

    async def log(self, *values: Any) -> EchoRecord:
        """Like print(): values are stringified and joined by spaces."""
        return await self._emit(EchoKind.LOG, TextPayload(join_values(values)))

    async def warn(self, *values: Any) -> EchoRecord:
        return await self._emit(EchoKind.WARN, TextPayload(join_values(values)))

    async def error(self, err: Any) -> EchoRecord:
        """Accepts a message, an exception or a {message, stack} mapping."""
        return await self._emit(EchoKind.ERROR, describe_error(err))

    async def objekt(self, value: Any) -> EchoRecord:
        return await self._emit(EchoKind.OBJECT, StructuredPayload(value))

    async def image(self, blob: Any) -> EchoRecord:
        """Opaque encoded image (e.g. base64). Passed through untouched."""
        return await self._emit(EchoKind.IMAGE, BlobPayload(blob))

    async def question(self, text: Any, timeout_ms: int | None = None) -> Any:
        """Echo a question and wait for its answer on "echo-answer".

        The answer must be published as (sender_id, text, answer). Raises
        QuestionTimeout when nothing matching arrives in time.
        """
        question_text = _question_key(text)
        self._process(EchoKind.QUESTION, TextPayload(question_text))
        future = self._engine.ask(
            self.sender_id, question_text, timeout_ms or self.answer_timeout_ms
        )
        return await future

    def answer(self, question_text: Any, value: Any, sender: str | None = None) -> None:
        """Publish an answer for a question asked by ``sender`` (default: us).

        ``question_text`` goes through the same coercion question() applies,
        so answering with the raw value that was asked matches.
        """
        who = self.sender_id if sender is None else str(sender)
        self.bus.publish(ECHO_ANSWER, who, _question_key(question_text), value)

    # ------------------------------------------------------------------
    # Fire-and-forget
    # ------------------------------------------------------------------

    def submit(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task:
        """Schedule an emit without awaiting it. Keeps the task referenced."""
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def drain(self) -> list[Any]:
        """Wait for every submitted task; results (or exceptions) in order."""
        results: list[Any] = []
        while self._tasks:
            batch = list(self._tasks)
            self._tasks.difference_update(batch)
            results.extend(await asyncio.gather(*batch, return_exceptions=True))
        return results

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Release outstanding questions and our own bus subscriptions."""
        self._engine.shutdown()
        if self._mirror is not None:
            self.bus.unsubscribe(self._mirror)
            self._mirror = None
        if self._owns_bus and isinstance(self.bus, PyventusBus):
            self.bus.close()

    async def __aenter__(self) -> Echo:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.drain()
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _emit(self, kind: EchoKind, payload: Payload) -> EchoRecord:
        record = self._process(kind, payload)
        await asyncio.sleep(self.pace_ms / 1000)
        return record

    def _process(self, kind: EchoKind, payload: Payload) -> EchoRecord:
        record = EchoRecord(sender=self.sender_id, payload=payload, kind=kind)
        self._history.append(record)

        try:
            self.sink.write(record)
        except Exception:
            _get_logger().warning("echo.sink.failed", kind=kind.value, exc_info=True)

        try:
            self.bus.publish(ECHO_EVENT, record)
        except Exception:
            _get_logger().warning("echo.publish.failed", kind=kind.value, exc_info=True)

        return record

    def __repr__(self) -> str:
        return (
            f"Echo(sender_id={self.sender_id!r}, pace_ms={self.pace_ms}, "
            f"echoes={len(self._history)}, pending={self._engine.pending_count})"
        )
