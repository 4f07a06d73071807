"""Logging setup shared by the operator CLI."""

from __future__ import annotations

import logging
import os

DEFAULT_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def resolve_level(level: str | None = None) -> str:
    value = level or os.environ.get("PATTON_ACCEPTANCE_LOG_LEVEL") or DEFAULT_LEVEL
    value = value.strip().upper()
    if not isinstance(logging.getLevelName(value), int):
        raise ValueError(f"Unknown log level: {value!r}")
    return value


def setup_logging(level: str | None = None) -> None:
    logging.basicConfig(level=resolve_level(level), format=LOG_FORMAT)
