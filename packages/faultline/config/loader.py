"""Settings cascade.

Sources, highest priority first: ``cli_params``, ``FAULTLINE_*`` environment
variables (``__`` separates nested keys, so ``FAULTLINE_STACKS__MAX_FRAMES=8``
sets ``stacks.max_frames``), the YAML file, then model defaults. Values are
merged as raw mappings and validated once; pydantic coerces env strings.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .models import DEFAULT_CONFIG_PATH, FaultlineSettings

ENV_PREFIX = "FAULTLINE_"


def load_settings(
    *,
    cli_params: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
    config_path: str | Path | None = None,
) -> FaultlineSettings:
    """Resolve and validate settings from every source."""
    merged: dict[str, Any] = {}
    for layer in (
        read_config_file(config_path),
        read_environment(os.environ if environ is None else environ),
        cli_params or {},
    ):
        _overlay(merged, layer)
    return FaultlineSettings.model_validate(merged)


def read_config_file(path: str | Path | None = None) -> dict[str, Any]:
    """Load the YAML file; a missing or empty file contributes nothing."""
    resolved = DEFAULT_CONFIG_PATH if path is None else Path(path)
    if not resolved.is_file():
        return {}
    parsed = yaml.safe_load(resolved.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(f"faultline config must be a mapping at top level: {resolved}")
    return parsed


def read_environment(environ: Mapping[str, str]) -> dict[str, Any]:
    """Nest ``FAULTLINE_A__B=value`` variables as ``{"a": {"b": "value"}}``."""
    layer: dict[str, Any] = {}
    for name, raw in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        keys = [key.lower() for key in name[len(ENV_PREFIX) :].split("__") if key]
        if keys:
            _overlay(layer, _nest(keys, raw))
    return layer


def _nest(keys: list[str], value: Any) -> dict[str, Any]:
    for key in reversed(keys[1:]):
        value = {key: value}
    return {keys[0]: value}


def _overlay(target: dict[str, Any], layer: Mapping[str, Any]) -> None:
    """Merge ``layer`` into ``target`` in place; nested mappings merge key-wise."""
    for key, value in layer.items():
        if isinstance(value, Mapping):
            child = target.get(key)
            if not isinstance(child, dict):
                child = target[key] = {}
            _overlay(child, value)
        else:
            target[key] = value
