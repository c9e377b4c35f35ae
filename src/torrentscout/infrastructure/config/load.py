"""Layered configuration loading: defaults < YAML < environment < CLI."""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import SECTIONED_FIELDS, SECTIONS, AppConfig, EnvOverrides

_TOP_LEVEL_KEYS = ("app_name", "environment")


def _sectioned(layer: Mapping[str, Any]) -> dict[str, Any]:
    """Bring one layer into the YAML shape.

    Layers may mix shapes: YAML uses sections, env and CLI use flat field
    names.  Unknown keys are dropped.
    """
    out: dict[str, Any] = {
        key: dict(value)
        for key, value in layer.items()
        if key in SECTIONS and isinstance(value, Mapping)
    }
    for key, value in layer.items():
        if key in _TOP_LEVEL_KEYS:
            out[key] = value
        elif key in SECTIONED_FIELDS:
            section, section_key = SECTIONED_FIELDS[key]
            out.setdefault(section, {})[section_key] = value
    return out


def _overlay(target: dict[str, Any], layer: Mapping[str, Any]) -> None:
    """Merge *layer* into *target* in place; mappings merge, anything else replaces."""
    for key, value in layer.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _overlay(current, value)
        else:
            target[key] = value


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Merge every configuration layer and validate the result once.

    A ``.env`` file only fills variables that are not already set.
    Nothing is written to disk.
    """
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    layers: list[Mapping[str, Any]] = [deepcopy(DEFAULT_CONFIG)]
    if config_path is not None:
        layers.append(_read_yaml(config_path))
    layers.append(EnvOverrides().to_update_dict())
    layers.append(cli_overrides or {})

    merged: dict[str, Any] = {}
    for layer in layers:
        _overlay(merged, _sectioned(layer))
    return AppConfig.model_validate(merged)
