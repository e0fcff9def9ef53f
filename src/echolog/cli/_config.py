"""CLI configuration: EchoConfig loaded once per invocation."""

from __future__ import annotations

from pathlib import Path

from echolog.config import EchoConfig

_config: EchoConfig | None = None


def load_config(path: Path | None = None) -> EchoConfig:
    """Load (or reload) the config the commands will use."""
    global _config
    _config = EchoConfig.load(path)
    return _config


def get_config() -> EchoConfig:
    """Get the current configuration, loading defaults on first use."""
    if _config is None:
        return load_config()
    return _config


def reset_config() -> None:
    """Reset for testing."""
    global _config
    _config = None
