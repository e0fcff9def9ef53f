"""Shared fixtures: a private bus per test, a quiet Echo, clean logging."""

from __future__ import annotations

import logging

import pytest

from echolog.bus import PyventusBus
from echolog.facade import Echo
from echolog.history import EchoLog
from echolog.logging import shutdown_logging
from echolog.records import EchoRecord


class RecordingSink:
    """Keeps every record it is handed."""

    def __init__(self) -> None:
        self.records: list[EchoRecord] = []

    def write(self, record: EchoRecord) -> None:
        self.records.append(record)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Detach echolog handlers and restore the logger level around each test."""
    shutdown_logging()
    yield
    shutdown_logging()
    logging.getLogger("echolog").setLevel(logging.NOTSET)


@pytest.fixture
def bus():
    b = PyventusBus()
    yield b
    b.close()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
async def echo(bus, sink):
    e = Echo(pace_ms=0, bus=bus, answer_timeout_ms=1000, sender_id="user1", sink=sink)
    yield e
    e.close()


@pytest.fixture
def history() -> EchoLog:
    return EchoLog()
