from __future__ import annotations

import json
from dataclasses import fields
from pathlib import Path
from typing import Any

from wifiselect.core.domain.config import SelectorConfig

_FIELD_TYPES: dict[str, type] = {f.name: type(f.default) for f in fields(SelectorConfig)}


def _require(payload: dict[str, Any], key: str, expected_type: type) -> Any:
    value = payload[key]
    if expected_type is int:
        if not isinstance(value, int) or isinstance(value, bool):
            raise ValueError(f"Field '{key}' must be int")
        return value
    if expected_type is bool:
        if not isinstance(value, bool):
            raise ValueError(f"Field '{key}' must be bool")
        return value
    if not isinstance(value, expected_type):
        raise ValueError(f"Field '{key}' must be {expected_type.__name__}")
    return value


def selector_config_from_dict(payload: dict[str, Any]) -> SelectorConfig:
    """Build a validated SelectorConfig; missing keys keep their defaults."""
    if not isinstance(payload, dict):
        raise ValueError("Selector config must be a JSON object")

    unknown = sorted(k for k in payload if k not in _FIELD_TYPES)
    if unknown:
        raise ValueError(f"Unknown selector config fields: {unknown}")

    values = {key: _require(payload, key, _FIELD_TYPES[key]) for key in payload}
    config = SelectorConfig(**values)
    config.validate()
    return config


def load_selector_config(path: Path) -> SelectorConfig:
    if not path.exists():
        raise ValueError(f"Selector config not found: {path}")
    payload = json.loads(path.read_text(encoding="utf-8"))
    return selector_config_from_dict(payload)
