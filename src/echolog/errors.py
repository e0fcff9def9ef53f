"""echolog exceptions.

``QuestionTimeout`` is the one callers should expect. Rendering and serialization
problems are absorbed where they happen.
"""

from __future__ import annotations


class EchoError(Exception):
    """Base class for echolog errors."""


class QuestionTimeout(EchoError, TimeoutError):
    """A question got no matching answer within its window."""

    def __init__(self, question: str, sanitized: str, timeout_ms: int) -> None:
        self.question = question
        self.sanitized = sanitized
        self.timeout_ms = timeout_ms
        super().__init__(f"No answer for '{sanitized}' within {timeout_ms}ms")
