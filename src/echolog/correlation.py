"""Question/answer correlation over the bus.

A question is outstanding from ``ask()`` until the first of:
    - a matching ("echo-answer", sender, question_text, answer) publish
    - its timer firing
    - engine shutdown
    - the caller cancelling the returned future

Whichever comes first claims the PendingQuestion under the engine lock; the
loser sees ``resolved`` already set and does nothing. Every exit path
removes the bus subscription and cancels the timer.

Answers may be published from other threads. Settlement is always moved
onto the loop that owns the future.
"""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable

from echolog.bus import ECHO_ANSWER, EventBus
from echolog.errors import EchoError, QuestionTimeout
from echolog.logging import get_logger
from echolog.text import sanitize_question


def _get_logger():
    return get_logger("echolog.correlation")


@dataclass(eq=False)
class PendingQuestion:
    sender: str
    question_text: str
    timeout_ms: int
    deadline: float  # loop.time() based
    future: asyncio.Future
    loop: asyncio.AbstractEventLoop
    subscription: Any = None
    timer: asyncio.TimerHandle | None = None
    resolved: bool = False

    @property
    def key(self) -> tuple[str, str]:
        return (self.sender, self.question_text)

    def matches(self, sender: Any, question_text: Any) -> bool:
        return sender == self.sender and question_text == self.question_text


class CorrelationEngine:
    """Matches answers on the bus to outstanding questions.

    Two asks with the same (sender, question_text) are independent and
    both listen on the shared answer topic, so one answer broadcast can
    settle both.
    """

    def __init__(self, bus: EventBus) -> None:
        self._bus = bus
        self._pending: set[PendingQuestion] = set()
        self._lock = threading.Lock()
        self._closed = False

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    def outstanding(self) -> tuple[tuple[str, str], ...]:
        """Correlation keys of questions still waiting, oldest deadline first."""
        with self._lock:
            pending = sorted(self._pending, key=lambda p: p.deadline)
        return tuple(p.key for p in pending)

    def ask(self, sender: Any, question_text: Any, timeout_ms: int) -> asyncio.Future:
        """Wait for the first matching answer, or fail after ``timeout_ms``.

        Must be called from a running event loop. The returned future
        resolves with the answer value or fails with QuestionTimeout.
        """
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be > 0, got {timeout_ms}")
        if self._closed:
            raise EchoError("correlation engine is shut down")

        loop = asyncio.get_running_loop()
        pending = PendingQuestion(
            sender=str(sender),
            question_text=str(question_text),
            timeout_ms=timeout_ms,
            deadline=loop.time() + timeout_ms / 1000,
            future=loop.create_future(),
            loop=loop,
        )

        def _on_answer(*args: Any) -> None:
            if len(args) < 3 or not pending.matches(args[0], args[1]):
                return
            self._dispatch(pending, self._fulfill, args[2])

        with self._lock:
            self._pending.add(pending)
        pending.subscription = self._bus.subscribe(ECHO_ANSWER, _on_answer)
        pending.timer = loop.call_later(timeout_ms / 1000, self._expire, pending)
        pending.future.add_done_callback(partial(self._on_future_done, pending))

        _get_logger().debug(
            "question.asked",
            sender=pending.sender,
            question=sanitize_question(pending.question_text),
            timeout_ms=timeout_ms,
        )
        return pending.future

    def shutdown(self) -> None:
        """Release every outstanding question without answering or timing out.

        Subscriptions are removed and timers cancelled; waiting futures are
        cancelled so awaiting callers get CancelledError.
        """
        with self._lock:
            self._closed = True
            outstanding = list(self._pending)
            self._pending.clear()
            for pending in outstanding:
                pending.resolved = True

        for pending in outstanding:
            if pending.loop.is_closed():
                self._release(pending)
            else:
                self._dispatch(pending, self._cancel)

        if outstanding:
            _get_logger().info("question.shutdown", released=len(outstanding))

    # ------------------------------------------------------------------
    # Settlement
    # ------------------------------------------------------------------

    def _claim(self, pending: PendingQuestion) -> bool:
        with self._lock:
            if pending.resolved:
                return False
            pending.resolved = True
            self._pending.discard(pending)
            return True

    def _release(self, pending: PendingQuestion) -> None:
        if pending.timer is not None:
            pending.timer.cancel()
        if pending.subscription is not None:
            self._bus.unsubscribe(pending.subscription)
            pending.subscription = None

    def _dispatch(
        self, pending: PendingQuestion, fn: Callable[..., None], *args: Any
    ) -> None:
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is pending.loop:
            fn(pending, *args)
        elif not pending.loop.is_closed():
            pending.loop.call_soon_threadsafe(fn, pending, *args)

    def _cancel(self, pending: PendingQuestion) -> None:
        # Runs on the owning loop: timer handles are not thread-safe
        self._release(pending)
        pending.future.cancel()

    def _fulfill(self, pending: PendingQuestion, answer: Any) -> None:
        if not self._claim(pending):
            return
        self._release(pending)
        if not pending.future.done():
            pending.future.set_result(answer)
        _get_logger().debug(
            "question.answered",
            sender=pending.sender,
            question=sanitize_question(pending.question_text),
        )

    def _expire(self, pending: PendingQuestion) -> None:
        if not self._claim(pending):
            return
        self._release(pending)
        sanitized = sanitize_question(pending.question_text)
        if not pending.future.done():
            pending.future.set_exception(
                QuestionTimeout(pending.question_text, sanitized, pending.timeout_ms)
            )
        _get_logger().info(
            "question.timeout",
            sender=pending.sender,
            question=sanitized,
            timeout_ms=pending.timeout_ms,
        )

    def _on_future_done(self, pending: PendingQuestion, future: asyncio.Future) -> None:
        # Only reachable unclaimed when the caller cancelled the future
        if future.cancelled() and self._claim(pending):
            self._release(pending)
