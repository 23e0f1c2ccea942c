"""
Load FastRippleConfig from JSON or YAML.

Accepted layouts::

    std_rms: 5
    std_peaks: 3

or nested under a ``fast_ripple`` section (other top-level keys are ignored)::

    fast_ripple:
      std_rms: 4
      max_gap_ms: 10
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union

from .hfo_detector import FastRippleConfig

SECTION = "fast_ripple"


def _read_mapping(path: Path) -> Dict[str, Any]:
    if path.suffix.lower() in (".yml", ".yaml"):
        try:
            import yaml  # type: ignore
        except Exception as exc:
            raise ImportError("YAML config requires PyYAML (pip install pyyaml)") from exc
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    else:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping, got {type(data).__name__}: {path}")
    return data


def load_config(path: Union[str, Path]) -> FastRippleConfig:
    cfg_path = Path(path).expanduser()
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config not found: {cfg_path}")

    data = _read_mapping(cfg_path)
    if SECTION in data:
        data = data[SECTION] or {}
        if not isinstance(data, dict):
            raise ValueError(f"'{SECTION}' section must be a mapping: {cfg_path}")
    return FastRippleConfig.from_dict(data)
