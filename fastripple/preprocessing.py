"""
Signal preparation for Fast Ripple detection

This module handles:
- Input validation (single-channel signal, sampling rate)
- Zero-phase band-pass filtering of a caller-supplied filter:
  - (b, a) transfer-function coefficients
  - Second-order sections, shape (n_sections, 6)
  - FIR numerator (a = 1)
  - Any callable filterer (pluggable numeric backend)
- Moving-mean envelope with boundary truncation

Filter *design* is left to the caller (e.g. ``scipy.signal.butter``).
"""

from __future__ import annotations

import math
from typing import Any, Callable, Union

import numpy as np
from scipy.signal import filtfilt, sosfiltfilt


class InvalidInputError(ValueError):
    """Input that cannot be processed (bad signal, sampling rate or filter)."""


def as_signal(signal: Any) -> np.ndarray:
    """Coerce a single-channel signal to a finite 1D float64 array."""
    try:
        x = np.asarray(signal, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"signal must be numeric, got {type(signal).__name__}") from exc
    if x.ndim != 1:
        raise InvalidInputError(f"Expected a 1D signal (n_samples,), got shape {x.shape}")
    if x.size == 0:
        raise InvalidInputError("signal is empty")
    if not np.all(np.isfinite(x)):
        raise InvalidInputError("signal contains NaN or infinite samples")
    return x


def check_sfreq(sfreq: Any) -> float:
    try:
        sfreq = float(sfreq)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"sfreq must be a number, got {sfreq!r}") from exc
    if not math.isfinite(sfreq) or sfreq <= 0:
        raise InvalidInputError(f"sfreq must be > 0, got {sfreq}")
    return sfreq


def round_half_up(x: float) -> int:
    """Round to nearest integer, halves away from zero (``round(2.5) == 3``)."""
    return int(math.floor(abs(x) + 0.5)) * (1 if x >= 0 else -1)


def ms_to_samples(ms: float, sfreq: float, *, minimum: int = 1) -> int:
    """Convert a duration in milliseconds to a sample count (at least ``minimum``)."""
    return max(int(minimum), round_half_up(float(ms) * 1e-3 * float(sfreq)))


class Filterer:
    """
    Abstract interface for zero-phase filtering.

    Implementations return an array the same length as the input with no time shift.
    """

    def __call__(self, signal: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class ZeroPhaseFilter(Filterer):
    """Forward-backward filtering with scipy (``filtfilt`` / ``sosfiltfilt``)."""

    def __init__(self, spec: Any):
        self.sos = None
        self.b = None
        self.a = None

        # (b, a) tuple, as returned by butter(..., output="ba")
        if isinstance(spec, tuple) and len(spec) == 2 and all(np.ndim(c) == 1 for c in spec):
            try:
                b = np.asarray(spec[0], dtype=np.float64)
                a = np.asarray(spec[1], dtype=np.float64)
            except (TypeError, ValueError) as exc:
                raise InvalidInputError("Filter coefficients (b, a) must be numeric") from exc
            self._set_ba(b, a)
            return

        try:
            arr = np.asarray(spec, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"Unsupported filter specification: {spec!r}") from exc
        if arr.ndim == 2:
            if arr.shape[1] != 6 or arr.shape[0] == 0:
                raise InvalidInputError(f"SOS filter must have shape (n_sections, 6), got {arr.shape}")
            if np.any(arr[:, 3] == 0):
                raise InvalidInputError("SOS filter has a zero leading denominator coefficient")
            self.sos = arr
        elif arr.ndim == 1:
            # FIR numerator
            self._set_ba(arr, np.array([1.0]))
        else:
            raise InvalidInputError(f"Unsupported filter specification with shape {arr.shape}")

    def _set_ba(self, b: np.ndarray, a: np.ndarray) -> None:
        if b.ndim != 1 or a.ndim != 1 or b.size == 0 or a.size == 0:
            raise InvalidInputError("Filter coefficients (b, a) must be non-empty 1D sequences")
        if a[0] == 0:
            raise InvalidInputError("Filter denominator a[0] must be non-zero")
        self.b = b
        self.a = a

    @property
    def order(self) -> int:
        if self.sos is not None:
            return 2 * self.sos.shape[0]
        return max(self.b.size, self.a.size) - 1

    def __call__(self, signal: np.ndarray) -> np.ndarray:
        try:
            if self.sos is not None:
                return sosfiltfilt(self.sos, signal)
            return filtfilt(self.b, self.a, signal)
        except ValueError as exc:
            raise InvalidInputError(
                f"Filter (order {self.order}) is incompatible with a signal of "
                f"{np.asarray(signal).shape[-1]} samples: {exc}"
            ) from exc

    def __repr__(self) -> str:
        kind = "sos" if self.sos is not None else "ba"
        return f"ZeroPhaseFilter(kind={kind!r}, order={self.order})"


FilterSpec = Union[Filterer, Callable[[np.ndarray], np.ndarray], Any]


def as_filterer(spec: FilterSpec) -> Callable[[np.ndarray], np.ndarray]:
    """Return callables unchanged; wrap coefficient specs in :class:`ZeroPhaseFilter`."""
    if callable(spec):
        return spec
    return ZeroPhaseFilter(spec)


def apply_filter(signal: np.ndarray, spec: FilterSpec) -> np.ndarray:
    """Band-pass ``signal`` with a zero-phase filter; output has the same length."""
    filt = as_filterer(spec)
    out = np.asarray(filt(signal), dtype=np.float64)
    if out.shape != signal.shape:
        raise InvalidInputError(
            f"Filter returned shape {out.shape} for input shape {signal.shape}"
        )
    return out


def moving_mean(x: np.ndarray, win: int) -> np.ndarray:
    """
    Centered moving average with truncated edges.

    Odd windows span (win-1)/2 samples on each side; even windows span win/2
    before and win/2-1 after. Near the boundaries only available samples are
    averaged (no zero padding).
    """
    x = np.asarray(x, dtype=np.float64)
    if win <= 1 or x.size == 0:
        return x
    n = x.shape[0]
    before = win // 2
    after = win - before - 1

    c = np.concatenate(([0.0], np.cumsum(x)))
    idx = np.arange(n)
    lo = np.maximum(idx - before, 0)
    hi = np.minimum(idx + after + 1, n)
    return (c[hi] - c[lo]) / (hi - lo)


def rectified_envelope(filtered: np.ndarray, win: int) -> np.ndarray:
    """Moving mean of the rectified band-passed signal."""
    return moving_mean(np.abs(filtered), win)
