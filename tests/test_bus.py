"""Tests for the pyventus-backed bus."""

from __future__ import annotations

import asyncio

from pyventus.events import EventLinker

from echolog.bus import ECHO_ANSWER, ECHO_EVENT, EchoEventLinker, EventBus, PyventusBus


async def _settle(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


class TestPyventusBus:
    def test_satisfies_protocol(self, bus):
        assert isinstance(bus, EventBus)

    def test_private_linker_per_bus(self):
        a, b = PyventusBus(), PyventusBus()
        assert a.linker is not b.linker
        assert issubclass(a.linker, EchoEventLinker)
        assert issubclass(a.linker, EventLinker)

    async def test_broadcast_to_all_subscribers(self, bus):
        first: list[tuple] = []
        second: list[tuple] = []
        bus.subscribe(ECHO_ANSWER, lambda *args: first.append(args))
        bus.subscribe(ECHO_ANSWER, lambda *args: second.append(args))
        bus.publish(ECHO_ANSWER, "u1", "Go?", "yes")
        await _settle()
        assert first == [("u1", "Go?", "yes")]
        assert second == [("u1", "Go?", "yes")]

    async def test_topics_are_separate(self, bus):
        seen: list[tuple] = []
        bus.subscribe(ECHO_EVENT, lambda *args: seen.append(args))
        bus.publish(ECHO_ANSWER, "u1", "Go?", "yes")
        await _settle()
        assert seen == []

    async def test_buses_do_not_share_subscribers(self):
        a, b = PyventusBus(), PyventusBus()
        seen: list[tuple] = []
        a.subscribe(ECHO_EVENT, lambda *args: seen.append(args))
        b.publish(ECHO_EVENT, "x")
        await _settle()
        assert seen == []
        a.close()
        b.close()

    async def test_unsubscribe_stops_delivery(self, bus):
        seen: list[tuple] = []
        handle = bus.subscribe(ECHO_EVENT, lambda *args: seen.append(args))
        assert bus.unsubscribe(handle) is True
        bus.publish(ECHO_EVENT, "x")
        await _settle()
        assert seen == []

    def test_unsubscribe_twice(self, bus):
        handle = bus.subscribe(ECHO_EVENT, lambda *args: None)
        assert bus.unsubscribe(handle) is True
        assert bus.unsubscribe(handle) is False

    def test_publish_without_loop_dispatches_synchronously(self, bus):
        seen: list[tuple] = []
        bus.subscribe(ECHO_EVENT, lambda *args: seen.append(args))
        bus.publish(ECHO_EVENT, "sync")
        assert seen == [("sync",)]

    def test_publish_with_no_subscribers(self, bus):
        bus.publish(ECHO_EVENT, "nobody listening")

    def test_subscriber_count_and_close(self, bus):
        bus.subscribe(ECHO_EVENT, lambda *args: None)
        bus.subscribe(ECHO_ANSWER, lambda *args: None)
        bus.subscribe(ECHO_ANSWER, lambda *args: None)
        assert bus.subscriber_count() == 3
        assert bus.subscriber_count(ECHO_ANSWER) == 2
        bus.close()
        assert bus.subscriber_count() == 0
