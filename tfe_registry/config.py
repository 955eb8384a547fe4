"""
Configuration loading and normalized section access for the registry client.
Config is a plain dict (usually from YAML); each section is normalized and clamped in one place.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable

import yaml

from tfe_registry.api.client import DEFAULT_ADDRESS, DEFAULT_BASE_PATH

logger = logging.getLogger(__name__)

CONFIG_ENV = "TFE_REGISTRY_CONFIG"
ADDRESS_ENV = "TFE_ADDRESS"
TOKEN_ENV = "TFE_TOKEN"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML mapping from path. Returns {} if missing, empty or not a mapping."""
    if not path.exists():
        return {}
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not load config %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def load_config(path: str | Path | None = None) -> dict[str, Any]:
    """
    Load the raw config dict.

    Args:
        path: Config file; defaults to $TFE_REGISTRY_CONFIG. No file means {}.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV)
        if not env_path:
            return {}
        path = env_path
    return load_yaml_file(Path(path))


def get_section(
    raw_config: dict,
    section: str,
    defaults: dict[str, Any],
    validators: dict[str, Callable[[Any], Any]] | None = None,
) -> dict[str, Any]:
    """
    Return a normalized config section by merging raw section with defaults and applying validators.
    A value that fails its validator falls back to the default.

    Args:
        raw_config: Full config dict (e.g. from load_config()).
        section: Top-level key (e.g. "registry").
        defaults: Default values for the section; unknown keys in the raw section are dropped.
        validators: Optional dict mapping section key -> callable(value) -> value (e.g. clamp int).
    """
    validators = validators or {}
    raw_section = dict(raw_config.get(section) or {})
    out = dict(defaults)
    for k, v in raw_section.items():
        if k in defaults:
            out[k] = v
    for k, validator in validators.items():
        if k in out:
            try:
                out[k] = validator(out[k])
            except (TypeError, ValueError):
                logger.debug("Invalid %s.%s=%r, using default", section, k, out[k])
                out[k] = validator(defaults[k])
    return out


def _clamp(lo: float, hi: float | None, cast: Callable[[Any], Any]) -> Callable[[Any], Any]:
    def _v(value: Any) -> Any:
        n = cast(value)
        n = max(lo, n)
        if hi is not None:
            n = min(hi, n)
        return cast(n)

    return _v


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _base_path(value: Any) -> str:
    s = str(value).strip().strip("/")
    return f"/{s}/" if s else "/"


def _bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("0", "false", "no", "off", "")
    return bool(value)


def get_registry_section(raw_config: dict) -> dict[str, Any]:
    """
    Return normalized registry client config. Environment variables override the file for
    address (TFE_ADDRESS) and token (TFE_TOKEN).
    """
    defaults: dict[str, Any] = {
        "address": DEFAULT_ADDRESS,
        "base_path": DEFAULT_BASE_PATH,
        "token": None,
        "timeout_sec": 30.0,
        "retry_max": 3,
        "retry_delay_sec": 1.0,
        "circuit_breaker_failure_threshold": 5,
        "circuit_breaker_recovery_timeout_sec": 60.0,
        "strict_decoding": True,
        "log_level": "INFO",
        "log_path": None,
    }
    out = get_section(
        raw_config,
        "registry",
        defaults,
        validators={
            "address": lambda v: str(v).strip().rstrip("/") or DEFAULT_ADDRESS,
            "base_path": _base_path,
            "token": _optional_str,
            "timeout_sec": _clamp(1.0, 300.0, float),
            "retry_max": _clamp(0, 10, int),
            "retry_delay_sec": _clamp(0.0, None, float),
            "circuit_breaker_failure_threshold": _clamp(1, None, int),
            "circuit_breaker_recovery_timeout_sec": _clamp(1.0, None, float),
            "strict_decoding": _bool,
            "log_level": lambda v: str(v).strip().upper() or "INFO",
            "log_path": _optional_str,
        },
    )
    env_address = os.environ.get(ADDRESS_ENV, "").strip()
    if env_address:
        out["address"] = env_address.rstrip("/")
    env_token = os.environ.get(TOKEN_ENV, "").strip()
    if env_token:
        out["token"] = env_token
    return out


def validate_config(section: dict[str, Any]) -> None:
    """Validate a normalized registry section. Raises ValueError with a clear message if invalid."""
    if not section.get("token"):
        raise ValueError(
            f"registry.token must be set (or export {TOKEN_ENV})"
        )
    address = str(section.get("address") or "")
    if not address.startswith(("http://", "https://")):
        raise ValueError("registry.address must be an http:// or https:// URL")
