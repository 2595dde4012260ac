"""Configuration loading utilities for Script Signer."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Literal, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..crypto.signing import resolve_hash
from ..core.exceptions import UnsupportedAlgorithmError
from ..paths import local_config_path, runtime_config_dir


class SigningConfig(BaseModel):
    algorithm: str = Field(default="SHA-256", description="Hash algorithm used for RSA PKCS#1 v1.5 signatures")
    payload_encoding: str = Field(
        default="ascii",
        description="Text encoding applied to payloads before hashing, on both sign and verify paths",
    )
    wrap_lines: bool = Field(default=True, description="Wrap embedded base64 signatures at 76 characters")

    @field_validator("algorithm")
    @classmethod
    def _validate_algorithm(cls, value: str) -> str:
        try:
            resolve_hash(value)
        except UnsupportedAlgorithmError as exc:
            raise ValueError(str(exc)) from None
        return value

    @field_validator("payload_encoding")
    @classmethod
    def _validate_encoding(cls, value: str) -> str:
        try:
            "".encode(value)
        except LookupError:
            raise ValueError(f"Unknown text encoding: {value}") from None
        return value


class ScriptConfig(BaseModel):
    directive_keyword: str = Field(default="EXECUTE", description="Keyword introducing the invocation directive")
    line_ending: Literal["auto", "crlf", "lf"] = Field(
        default="auto", description="Line endings written into signed scripts"
    )

    @field_validator("directive_keyword")
    @classmethod
    def _validate_keyword(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Directive keyword must not be empty")
        if any(ch in value for ch in "(){}[]\r\n"):
            raise ValueError(f"Directive keyword contains bracket or newline characters: {value!r}")
        return value


class KeyConfig(BaseModel):
    private_key: Optional[Path] = Field(default=None, description="Default PEM private key for signing")
    public_key: Optional[Path] = Field(default=None, description="Default PEM public key for verification")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Logging verbosity level")

    def normalized_level(self) -> str:
        return self.level.upper()


class AppConfig(BaseModel):
    signing: SigningConfig = Field(default_factory=SigningConfig)
    script: ScriptConfig = Field(default_factory=ScriptConfig)
    keys: KeyConfig = Field(default_factory=KeyConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


DEFAULT_CONFIG = AppConfig()


def config_search_paths(explicit: Optional[Path] = None) -> Iterable[Path]:
    if explicit:
        yield explicit
    yield local_config_path()
    yield runtime_config_dir() / "config.yaml"


def load_config(path: Optional[Path] = None) -> AppConfig:
    for candidate in config_search_paths(path):
        if candidate.is_file():
            with candidate.open("r", encoding="utf-8") as handle:
                data = yaml.safe_load(handle) or {}
            try:
                return AppConfig.model_validate(data)
            except ValidationError as exc:
                raise ValueError(f"Invalid configuration in {candidate}: {exc}") from exc
    return DEFAULT_CONFIG.model_copy(deep=True)


def dump_default_config(target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(DEFAULT_CONFIG.model_dump(mode="json"), handle, sort_keys=False)


__all__ = [
    "AppConfig",
    "DEFAULT_CONFIG",
    "KeyConfig",
    "LoggingConfig",
    "ScriptConfig",
    "SigningConfig",
    "config_search_paths",
    "dump_default_config",
    "load_config",
]
