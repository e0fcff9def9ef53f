"""Event bus seam: the narrow pub/sub interface echolog consumes.

Two topics are used:
    "echo-event"   args: (EchoRecord,)                    every echo
    "echo-answer"  args: (sender, question_text, answer)  answers to questions

Any object satisfying ``EventBus`` works. ``PyventusBus`` is the default,
built on pyventus with a private linker namespace per bus instance so two
buses in one process never see each other's subscribers.
"""

from __future__ import annotations

import threading
from collections import Counter
from typing import Any, Callable, Protocol, runtime_checkable

from pyventus.events import EventEmitter, EventLinker

ECHO_EVENT = "echo-event"
ECHO_ANSWER = "echo-answer"


@runtime_checkable
class EventBus(Protocol):
    """Named-topic publish/subscribe with removable subscriptions.

    Delivery is broadcast: every subscriber of a topic sees every publish.
    """

    def subscribe(self, topic: str, callback: Callable[..., Any]) -> Any: ...

    def unsubscribe(self, handle: Any) -> bool: ...

    def publish(self, topic: str, *args: Any) -> None: ...


class EchoEventLinker(EventLinker):
    """Isolated event namespace for echolog topics."""

    pass


class PyventusBus:
    """pyventus-backed EventBus.

    Publishing from inside a running event loop schedules subscriber
    callbacks as tasks on that loop; publishing with no loop running
    dispatches synchronously.
    """

    def __init__(self, linker: type[EventLinker] | None = None) -> None:
        from pyventus.core.processing.asyncio import AsyncIOProcessingService

        if linker is None:

            class _BusLinker(EchoEventLinker):
                pass

            linker = _BusLinker

        self._linker = linker
        self._emitter = EventEmitter(
            event_linker=linker,
            event_processor=AsyncIOProcessingService(),
        )
        self._topics: dict[Any, str] = {}
        self._lock = threading.Lock()

    @property
    def linker(self) -> type[EventLinker]:
        return self._linker

    def subscribe(self, topic: str, callback: Callable[..., Any]) -> Any:
        subscriber = self._linker.subscribe(topic, event_callback=callback)
        with self._lock:
            self._topics[subscriber] = topic
        return subscriber

    def unsubscribe(self, handle: Any) -> bool:
        with self._lock:
            known = self._topics.pop(handle, None) is not None
        if not known:
            return False
        return self._linker.remove_subscriber(handle)

    def publish(self, topic: str, *args: Any) -> None:
        self._emitter.emit(topic, *args)

    def subscriber_count(self, topic: str | None = None) -> int:
        """Live subscriptions made through this bus, optionally per topic."""
        with self._lock:
            if topic is None:
                return len(self._topics)
            return Counter(self._topics.values())[topic]

    def close(self) -> None:
        """Drop every subscription registered through this bus."""
        with self._lock:
            handles = list(self._topics)
            self._topics.clear()
        for handle in handles:
            self._linker.remove_subscriber(handle)
