"""YAML + environment configuration loading."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .settings import Settings

ENV_PREFIX = "ADVTRADE_"
# Variables under the prefix that configure the loader itself, not Settings.
_RESERVED_ENV = {"CONFIG", "LOG_LEVEL"}


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}

    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config root in {path} must be a mapping, got: {type(loaded).__name__}")
    return loaded


def _merge_env(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """Overlay ``ADVTRADE_SECTION__KEY=value`` variables onto ``data``.

    Double underscores separate nesting levels; keys are lower-cased. Values
    stay strings and are coerced by the settings models.
    """
    merged = dict(data)

    for name, raw_value in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        remainder = name[len(ENV_PREFIX):]
        if remainder in _RESERVED_ENV:
            continue

        parts = [p.lower() for p in remainder.split("__") if p]
        if not parts:
            continue

        node = merged
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
            else:
                child = dict(child)
            node[part] = child
            node = child
        node[parts[-1]] = raw_value

    return merged


def load_settings(
    config_path: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from YAML, then apply environment overrides.

    The file defaults to ``$ADVTRADE_CONFIG`` or ``./config.yml``; a missing
    file yields defaults. Raises ValueError when validation fails.
    """
    env = os.environ if environ is None else environ
    if config_path is None:
        config_path = env.get(f"{ENV_PREFIX}CONFIG", "config.yml")

    data = _merge_env(_read_yaml(Path(config_path)), env)

    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc
