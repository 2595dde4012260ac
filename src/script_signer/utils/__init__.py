from __future__ import annotations

from .config import (
    AppConfig,
    DEFAULT_CONFIG,
    KeyConfig,
    LoggingConfig,
    ScriptConfig,
    SigningConfig,
    load_config,
)

__all__ = [
    "AppConfig",
    "DEFAULT_CONFIG",
    "KeyConfig",
    "LoggingConfig",
    "ScriptConfig",
    "SigningConfig",
    "load_config",
]
