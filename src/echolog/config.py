"""echolog configuration: dataclass defaults, YAML file, env overrides.

Priority: env var > YAML file > default.
Env vars use the ECHOLOG_{FIELD} convention (e.g. ECHOLOG_PACE_MS=50).
YAML file default: ~/.echolog/config.yaml
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

_TRUTHY = {"1", "true", "on", "yes"}
_FALSY = {"0", "false", "off", "no"}
_DEFAULT_PATH = Path("~/.echolog/config.yaml")

DEFAULT_ANSWER_TIMEOUT_MS = 30000


def _bool_env(var: str, default: bool) -> bool:
    raw = os.environ.get(var)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in _TRUTHY:
        return True
    if val in _FALSY:
        return False
    return default


def _int_env(var: str, default: int) -> int:
    raw = os.environ.get(var)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as err:
        raise ValueError(f"{var}={raw!r} is not a valid integer") from err


@dataclass
class EchoConfig:
    """Construction settings for an Echo facade plus its diagnostics logging."""

    # --- Echo behavior ---
    compact_output: bool = field(default_factory=lambda: _bool_env("ECHOLOG_COMPACT", True))
    pace_ms: int = field(default_factory=lambda: _int_env("ECHOLOG_PACE_MS", 100))
    answer_timeout_ms: int = field(
        default_factory=lambda: _int_env(
            "ECHOLOG_ANSWER_TIMEOUT_MS", DEFAULT_ANSWER_TIMEOUT_MS
        )
    )
    sender_id: str = field(default_factory=lambda: os.environ.get("ECHOLOG_SENDER", ""))
    color: bool = field(default_factory=lambda: _bool_env("ECHOLOG_COLOR", True))
    # Mirror every echo into the diagnostics log stream
    mirror_to_logs: bool = field(
        default_factory=lambda: _bool_env("ECHOLOG_MIRROR_TO_LOGS", False)
    )

    # --- Diagnostics logging: formatter × destination ---
    log_formatter: str = field(
        default_factory=lambda: os.environ.get("ECHOLOG_LOG_FORMATTER", "structlog")
    )  # "structlog" | "stdlib"
    log_destination: str = field(
        default_factory=lambda: os.environ.get("ECHOLOG_LOG_DESTINATION", "stderr")
    )  # "stderr" | "jsonl"
    log_level: str = field(
        default_factory=lambda: os.environ.get("ECHOLOG_LOG_LEVEL", "WARNING")
    )
    log_format: str = field(
        default_factory=lambda: os.environ.get("ECHOLOG_LOG_FORMAT", "json")
    )  # "json" | "console"
    log_path: str | None = field(default_factory=lambda: os.environ.get("ECHOLOG_LOG_PATH"))

    def __post_init__(self) -> None:
        if self.pace_ms < 0:
            raise ValueError(f"pace_ms must be >= 0, got {self.pace_ms}")
        # 0 means "use the default", same as Echo(answer_timeout_ms=0)
        if self.answer_timeout_ms < 0:
            raise ValueError(f"answer_timeout_ms must be >= 0, got {self.answer_timeout_ms}")
        if self.answer_timeout_ms == 0:
            self.answer_timeout_ms = DEFAULT_ANSWER_TIMEOUT_MS

    @classmethod
    def load(cls, path: Path | None = None) -> EchoConfig:
        """Load settings from a YAML file, then let ECHOLOG_* env vars win."""
        file_path = (path or _DEFAULT_PATH).expanduser()
        file_values: dict[str, Any] = {}

        if file_path.exists():
            raw = yaml.safe_load(file_path.read_text()) or {}
            if isinstance(raw, dict):
                known = {f.name for f in fields(cls)}
                file_values = {k: v for k, v in raw.items() if k in known}

        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            if f.name in file_values and _env_key(f.name) not in os.environ:
                kwargs[f.name] = _coerce(f.type, file_values[f.name])
            # else: default_factory reads the env var or falls back

        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


_ENV_NAMES = {
    "compact_output": "ECHOLOG_COMPACT",
    "sender_id": "ECHOLOG_SENDER",
}


def _env_key(name: str) -> str:
    return _ENV_NAMES.get(name, f"ECHOLOG_{name.upper()}")


def _coerce(type_name: Any, value: Any) -> Any:
    # Field annotations are strings under postponed evaluation
    if type_name == "bool":
        if isinstance(value, str):
            return value.strip().lower() in _TRUTHY
        return bool(value)
    if type_name == "int":
        return int(value)
    if value is None:
        return None
    return str(value)
