from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping
import tomllib

DEFAULT_BINARY = "patton"
DEFAULT_DATABASE = "patton.db.zst"
DEFAULT_TIMEOUT_SECONDS = 600.0
DEFAULT_CONFIG_FILENAME = "patton-acceptance.toml"

_CONFIG_CACHE: dict | None = None


@dataclass(frozen=True)
class HarnessConfig:
    binary_path: str
    database_path: str
    # None disables the per-invocation wall-clock limit.
    timeout: float | None = DEFAULT_TIMEOUT_SECONDS


def config_path() -> Path:
    override = os.environ.get("PATTON_ACCEPTANCE_CONFIG_PATH")
    if override:
        return Path(override).expanduser()
    return Path.cwd() / DEFAULT_CONFIG_FILENAME


def load_config() -> dict:
    path = config_path()
    if not path.exists():
        return {}
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ValueError(f"Invalid config file: {path}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Invalid config file structure: {path}")
    return data


def get_config() -> dict:
    global _CONFIG_CACHE
    if _CONFIG_CACHE is None:
        _CONFIG_CACHE = load_config()
    return _CONFIG_CACHE


def reset_config_cache() -> None:
    global _CONFIG_CACHE
    _CONFIG_CACHE = None


def get_config_value(*keys: str, default: object | None = None) -> object | None:
    current: object = get_config()
    for key in keys:
        if not isinstance(current, dict) or key not in current:
            return default
        current = current[key]
    return current


def parse_timeout(value: object) -> float | None:
    if isinstance(value, bool):
        raise ValueError(f"Invalid timeout: {value!r}")
    try:
        seconds = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid timeout: {value!r}") from exc
    return seconds if seconds > 0 else None


def _lookup(environ: Mapping[str, str], env_key: str, config_key: str, default: str) -> str:
    # A variable that is set wins even when empty; Patton decides what an empty path means.
    if env_key in environ:
        return environ[env_key]
    value = get_config_value("patton", config_key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"Config key patton.{config_key} must be a string, got {type(value).__name__}")
    return value


def load_harness_config(environ: Mapping[str, str] | None = None) -> HarnessConfig:
    env = os.environ if environ is None else environ
    if "PATTON_TIMEOUT" in env:
        timeout = parse_timeout(env["PATTON_TIMEOUT"])
    else:
        timeout = parse_timeout(get_config_value("patton", "timeout", default=DEFAULT_TIMEOUT_SECONDS))
    return HarnessConfig(
        binary_path=_lookup(env, "PATTON_BINARY", "binary", DEFAULT_BINARY),
        database_path=_lookup(env, "PATTON_DATABASE", "database", DEFAULT_DATABASE),
        timeout=timeout,
    )
