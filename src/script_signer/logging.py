"""Structured logging setup for Script Signer."""
from __future__ import annotations

import logging
import sys
from typing import Dict, Final

import structlog

_DEFAULT_LEVEL = "info"
_SECRET_FIELDS: Final = frozenset({"passphrase", "private_key", "private_pem", "signature_bytes"})


def configure_logging(level: str | None = None) -> None:
    """Configure structlog for the command line and embedding hosts.

    Records are JSON lines carrying ``level``, ``ts``, ``msg`` and
    ``component``. They go to stderr because commands such as ``params`` and
    ``canonicalize`` print their results on stdout. Fields that could hold key
    material are masked before rendering.
    """

    numeric_level = _level_from_str((level or _DEFAULT_LEVEL).lower())

    logging.basicConfig(
        level=numeric_level,
        handlers=[logging.StreamHandler(sys.stderr)],
        format="%(message)s",
        force=True,
    )

    structlog.configure(
        processors=[
            _drop_secret_fields,
            structlog.processors.TimeStamper(fmt="iso", key="ts"),
            structlog.stdlib.add_log_level,
            _component_processor,
            _rename_event_to_msg,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        cache_logger_on_first_use=True,
    )


def _drop_secret_fields(
    _logger: structlog.BoundLoggerBase, _name: str, event_dict: dict[str, object]
) -> dict[str, object]:
    for key in _SECRET_FIELDS.intersection(event_dict):
        event_dict[key] = "<redacted>"
    return event_dict


def _component_processor(
    logger: structlog.BoundLoggerBase, _name: str, event_dict: dict[str, object]
) -> dict[str, object]:
    """Tag each record with the emitting module, e.g. ``script_signer.crypto.keys``."""

    if event_dict.get("component") is None:
        event_dict["component"] = getattr(logger, "name", None) or "script_signer"
    return event_dict


def _rename_event_to_msg(
    _logger: structlog.BoundLoggerBase, _name: str, event_dict: dict[str, object]
) -> dict[str, object]:
    if "msg" not in event_dict:
        event_dict["msg"] = event_dict.pop("event", "")
    return event_dict


def _level_from_str(level: str) -> int:
    mapping: Dict[str, int] = {
        "critical": logging.CRITICAL,
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG,
    }
    return mapping.get(level, logging.INFO)


__all__ = ["configure_logging"]
