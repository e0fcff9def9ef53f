"""Echo sinks: where rendered echoes are written."""

from echolog.sinks.base import ConsoleSink
from echolog.sinks.noop_sink import NoOpSink
from echolog.sinks.terminal_sink import TerminalSink

__all__ = ["ConsoleSink", "NoOpSink", "TerminalSink"]
