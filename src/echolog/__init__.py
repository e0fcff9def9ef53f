"""echolog: a logging facade that echoes to the console and an event bus.

Public API:
    Echo              : log/warn/error/objekt/image/question facade
    EchoConfig        : settings (YAML file + ECHOLOG_* env vars)
    EchoRecord        : immutable record every emit produces
    EchoLog           : append-only per-facade history
    CorrelationEngine : question/answer matching with timeouts
    PyventusBus       : default in-process bus ("echo-event", "echo-answer")

Diagnostics logging (swappable formatter x destination):
    get_logger(name), setup_logging(cfg), register_formatter, register_destination
"""

from echolog.bus import ECHO_ANSWER, ECHO_EVENT, EventBus, PyventusBus
from echolog.config import EchoConfig
from echolog.correlation import CorrelationEngine, PendingQuestion
from echolog.errors import EchoError, QuestionTimeout
from echolog.facade import Echo
from echolog.history import EchoLog
from echolog.logging import (
    LogDestination,
    LogFormatter,
    get_logger,
    register_destination,
    register_formatter,
    setup_logging,
    shutdown_logging,
)
from echolog.records import (
    BlobPayload,
    EchoKind,
    EchoRecord,
    ErrorPayload,
    StructuredPayload,
    TextPayload,
)
from echolog.sinks import ConsoleSink, NoOpSink, TerminalSink
from echolog.subscribers import register_log_subscriber

__all__ = [
    # Facade
    "Echo",
    "EchoConfig",
    # Records
    "EchoKind",
    "EchoRecord",
    "TextPayload",
    "StructuredPayload",
    "ErrorPayload",
    "BlobPayload",
    "EchoLog",
    # Bus + correlation
    "EventBus",
    "PyventusBus",
    "ECHO_EVENT",
    "ECHO_ANSWER",
    "CorrelationEngine",
    "PendingQuestion",
    # Errors
    "EchoError",
    "QuestionTimeout",
    # Sinks
    "ConsoleSink",
    "TerminalSink",
    "NoOpSink",
    "register_log_subscriber",
    # Diagnostics logging
    "get_logger",
    "setup_logging",
    "shutdown_logging",
    "LogFormatter",
    "LogDestination",
    "register_formatter",
    "register_destination",
]
