# -*- coding: utf-8 -*-
"""
Engine settings. Defaults live here; a JSON or YAML file can override them.
"""
from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

SETTINGS_ENV_VAR = "COMPBLOCKS_SETTINGS"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "movements": {
        # Batch rows are applied in array order unless this is switched on;
        # sorting is stable and keyed on effective_date only.
        "sort_by_effective_date": False,
    },
    "export": {
        "filename_pattern": "monthly_staff_status_{month}.csv",
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}


def load_config(path: str | Path) -> Dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as fh:
        if path.suffix.lower() in {".yaml", ".yml"}:
            return yaml.safe_load(fh) or {}
        return json.load(fh)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _merge(out[key], value)
        else:
            out[key] = value
    return out


def load_settings(path: Optional[str | Path] = None) -> Dict[str, Any]:
    """Return DEFAULT_SETTINGS overlaid with *path* (or ``$COMPBLOCKS_SETTINGS``)."""
    path = path or os.environ.get(SETTINGS_ENV_VAR)
    if not path:
        return copy.deepcopy(DEFAULT_SETTINGS)
    return _merge(DEFAULT_SETTINGS, load_config(path))
