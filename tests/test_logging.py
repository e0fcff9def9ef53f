"""Tests for diagnostics logging and the echo mirror subscriber."""

from __future__ import annotations

import asyncio
import json
import logging

import pytest

from echolog.config import EchoConfig
from echolog.facade import Echo
from echolog.logging import (
    _CONFIGURED_DESTINATIONS,
    _DESTINATIONS,
    _FORMATTERS,
    JsonlFileDestination,
    LogDestination,
    LogFormatter,
    StderrDestination,
    StdlibFormatter,
    StructlogFormatter,
    get_logger,
    register_destination,
    register_formatter,
    setup_logging,
    shutdown_logging,
)


def _managed_handlers() -> list[logging.Handler]:
    return [
        h for h in logging.getLogger("echolog").handlers
        if getattr(h, "_echolog_managed", False)
    ]


class TestFormatters:
    def test_structlog_formatter_setup(self):
        result = StructlogFormatter().setup(EchoConfig(log_format="json"))
        assert isinstance(result, logging.Formatter)

    def test_stdlib_formatter_setup(self):
        result = StdlibFormatter().setup(EchoConfig(log_format="json"))
        assert isinstance(result, logging.Formatter)

    def test_stdlib_console_formatter(self):
        result = StdlibFormatter().setup(EchoConfig(log_format="console"))
        assert isinstance(result, logging.Formatter)

    def test_protocol_conformance(self):
        assert isinstance(StructlogFormatter(), LogFormatter)
        assert isinstance(StdlibFormatter(), LogFormatter)
        assert isinstance(StderrDestination(), LogDestination)


class TestSetup:
    def test_get_logger_before_setup_accepts_kwargs(self):
        get_logger("echolog.test").info("event.name", key="value")

    def test_setup_attaches_single_handler(self):
        setup_logging(EchoConfig(log_destination="stderr"))
        setup_logging(EchoConfig(log_destination="stderr"))
        assert len(_managed_handlers()) == 1

    def test_shutdown_detaches_handler(self):
        setup_logging(EchoConfig(log_destination="stderr"))
        shutdown_logging()
        assert _managed_handlers() == []

    def test_unknown_formatter_rejected(self):
        with pytest.raises(ValueError, match="formatter"):
            setup_logging(EchoConfig(log_formatter="nope"))

    def test_unknown_destination_rejected(self):
        with pytest.raises(ValueError, match="destination"):
            setup_logging(EchoConfig(log_destination="nope"))

    def test_level_applied(self):
        setup_logging(EchoConfig(log_level="DEBUG"))
        assert logging.getLogger("echolog").level == logging.DEBUG

    def test_stdlib_jsonl_output(self, tmp_path):
        path = tmp_path / "diag.jsonl"
        setup_logging(
            EchoConfig(
                log_formatter="stdlib",
                log_destination="jsonl",
                log_path=str(path),
                log_level="INFO",
            )
        )
        get_logger("echolog.test").info("question.timeout", timeout_ms=50)
        shutdown_logging()
        line = json.loads(path.read_text().strip().splitlines()[-1])
        assert line["event"] == "question.timeout"
        assert line["timeout_ms"] == 50
        assert line["logger"] == "echolog.test"

    def test_jsonl_destination_handler(self, tmp_path):
        dest = JsonlFileDestination(EchoConfig(log_path=str(tmp_path / "x.jsonl")))
        handler = dest.create_handler(logging.Formatter("%(message)s"))
        assert isinstance(handler, logging.FileHandler)
        dest.shutdown()


class TestRegistries:
    def test_register_custom_formatter(self):
        class Custom(StdlibFormatter):
            pass

        register_formatter("custom-test", Custom)
        try:
            setup_logging(EchoConfig(log_formatter="custom-test"))
        finally:
            _FORMATTERS.pop("custom-test", None)

    def test_register_custom_destination(self):
        created: list[logging.Handler] = []

        class Memory:
            def create_handler(self, formatter):
                handler = logging.NullHandler()
                created.append(handler)
                return handler

            def shutdown(self):
                pass

        register_destination("memory-test", Memory)
        try:
            setup_logging(EchoConfig(log_destination="memory-test"))
            assert created and created[0] in _managed_handlers()
        finally:
            _DESTINATIONS.pop("memory-test", None)

    def test_register_destination_needing_config(self, tmp_path):
        seen: list[EchoConfig] = []

        class Configured:
            def __init__(self, config: EchoConfig) -> None:
                seen.append(config)

            def create_handler(self, formatter):
                return logging.NullHandler()

            def shutdown(self):
                pass

        register_destination("configured-test", Configured, needs_config=True)
        cfg = EchoConfig(log_destination="configured-test", log_path=str(tmp_path / "x.log"))
        try:
            setup_logging(cfg)
            assert seen == [cfg]
        finally:
            _DESTINATIONS.pop("configured-test", None)
            _CONFIGURED_DESTINATIONS.discard(Configured)


class TestMirrorSubscriber:
    async def test_echoes_mirrored_to_logs(self, bus, sink, tmp_path):
        path = tmp_path / "mirror.jsonl"
        setup_logging(
            EchoConfig(
                log_formatter="stdlib",
                log_destination="jsonl",
                log_path=str(path),
                log_level="DEBUG",
            )
        )
        echo = Echo.from_config(EchoConfig(pace_ms=0, mirror_to_logs=True, sender_id="m"), bus=bus, sink=sink)
        await echo.warn("disk low")
        await echo.image(b"\x89PNG")
        for _ in range(5):
            await asyncio.sleep(0)
        echo.close()
        shutdown_logging()

        lines = [json.loads(raw) for raw in path.read_text().splitlines()]
        mirrored = [d for d in lines if d["logger"] == "echolog.echoes"]
        assert [d["event"] for d in mirrored] == ["echo.warn", "echo.image"]
        assert mirrored[0]["level"] == "warning"
        assert mirrored[0]["msg"] == "disk low"
        assert mirrored[0]["who"] == "m"
        assert mirrored[1]["msg"] == "<image>"
