"""
Fast Ripple (HFO) detection for single-channel LFP recordings.

Importing `fastripple` stays lightweight: public symbols are resolved lazily via
PEP 562 `__getattr__`, so scipy is only imported when a detector is used.

Example:
  from fastripple import detect_fast_ripples
"""

from __future__ import annotations

import importlib
from typing import Any, Dict, Tuple

__version__ = "0.1.0"


# Lazy-exported symbols (module, attr)
_LAZY_EXPORTS: Dict[str, Tuple[str, str]] = {
    # hfo_detector public API
    "FastRippleConfig": ("fastripple.hfo_detector", "FastRippleConfig"),
    "FastRippleDetector": ("fastripple.hfo_detector", "FastRippleDetector"),
    "FastRippleResult": ("fastripple.hfo_detector", "FastRippleResult"),
    "PeakFinder": ("fastripple.hfo_detector", "PeakFinder"),
    "ScipyPeakFinder": ("fastripple.hfo_detector", "ScipyPeakFinder"),
    "compute_thresholds": ("fastripple.hfo_detector", "compute_thresholds"),
    "count_peaks": ("fastripple.hfo_detector", "count_peaks"),
    "detect_fast_ripples": ("fastripple.hfo_detector", "detect_fast_ripples"),
    "find_segments": ("fastripple.hfo_detector", "find_segments"),
    "merge_segments": ("fastripple.hfo_detector", "merge_segments"),
    "validate_segments": ("fastripple.hfo_detector", "validate_segments"),
    # preprocessing public API
    "Filterer": ("fastripple.preprocessing", "Filterer"),
    "InvalidInputError": ("fastripple.preprocessing", "InvalidInputError"),
    "ZeroPhaseFilter": ("fastripple.preprocessing", "ZeroPhaseFilter"),
    "apply_filter": ("fastripple.preprocessing", "apply_filter"),
    "moving_mean": ("fastripple.preprocessing", "moving_mean"),
    # config / utils
    "load_config": ("fastripple.config", "load_config"),
    "events_to_seconds": ("fastripple.utils.event_utils", "events_to_seconds"),
    "summarize_events": ("fastripple.utils.event_utils", "summarize_events"),
}

__all__ = ["__version__", *_LAZY_EXPORTS.keys()]


def __getattr__(name: str) -> Any:
    if name in _LAZY_EXPORTS:
        mod_name, attr = _LAZY_EXPORTS[name]
        mod = importlib.import_module(mod_name)
        return getattr(mod, attr)
    raise AttributeError(f"module 'fastripple' has no attribute '{name}'")
