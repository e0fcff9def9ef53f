"""Text helpers: stringification, error normalization, question sanitizing.

None of these raise on odd input. Serialization failures degrade to the
failure's own text.
"""

from __future__ import annotations

import json
import re
import traceback
from collections.abc import Mapping, Set
from typing import Any

from echolog.records import ErrorPayload

_TAG_RE = re.compile(r"</?[^>]+(>|$)")
_SPACING_RE = re.compile(r"[\t\n\r\v\f]+")
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")


def _is_structured(value: Any) -> bool:
    return value is None or isinstance(value, (bool, Mapping, list, tuple, Set))


def to_text(value: Any) -> str:
    """Render one variadic argument the way log()/warn() join them.

    Booleans, None and containers are JSON-serialized compactly; anything
    that can't be serialized renders as the serialization error's message.
    Everything else uses str().
    """
    if _is_structured(value):
        try:
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as err:
            return str(err)
    try:
        return str(value)
    except Exception as err:
        return f"<unprintable {type(value).__name__}: {err}>"


def join_values(values: tuple[Any, ...]) -> str:
    return " ".join(to_text(v) for v in values)


def describe_error(err: Any) -> ErrorPayload:
    """Normalize a message, exception or {message, stack} mapping."""
    if isinstance(err, BaseException):
        if err.__traceback__ is not None:
            stack = "".join(traceback.format_exception(err))
        else:
            stack = "".join(traceback.format_exception_only(err)) + "".join(
                traceback.format_stack()[:-2]
            )
        return ErrorPayload(message=str(err), stack=stack)
    if isinstance(err, Mapping):
        message = err.get("message", "")
        stack = err.get("stack")
        return ErrorPayload(
            message=message if isinstance(message, str) else to_text(message),
            stack=None if stack is None else str(stack),
        )
    message = err if isinstance(err, str) else to_text(err)
    stack = f"Error: {message}\n" + "".join(traceback.format_stack()[:-2])
    return ErrorPayload(message=message, stack=stack)


def sanitize_question(text: Any) -> str:
    """Strip markup-like tags and control characters, then trim."""
    cleaned = _TAG_RE.sub("", str(text))
    cleaned = _SPACING_RE.sub(" ", cleaned)
    cleaned = _CONTROL_RE.sub("", cleaned)
    return cleaned.strip()
