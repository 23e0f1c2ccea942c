"""
Synthetic LFP signals for detector tests.

All generators are deterministic (seeded RNG) and return float64 arrays of
shape (n_samples,).
"""
from __future__ import annotations

import math
from typing import Sequence, Tuple

import numpy as np
from scipy.signal import butter

FS = 2000.0
FAST_RIPPLE_BAND = (250.0, 500.0)


def make_noise(duration_sec: float, sample_rate: float, *, std: float = 1.0, seed: int = 0) -> np.ndarray:
    """White Gaussian background noise."""
    rng = np.random.default_rng(seed)
    n_samples = int(round(duration_sec * sample_rate))
    return rng.normal(0.0, std, size=n_samples)


def make_sine(freq_hz: float, amplitude: float, n_samples: int, sample_rate: float) -> np.ndarray:
    t = np.arange(n_samples, dtype=np.float64) / sample_rate
    return amplitude * np.sin(2.0 * math.pi * freq_hz * t)


def inject_bursts(
    background: np.ndarray,
    bursts: Sequence[Tuple[int, int, float, float]],
    sample_rate: float,
) -> np.ndarray:
    """Add sine bursts to ``background``.

    Args:
        bursts: (start_sample, n_samples, freq_hz, amplitude) per burst.
    """
    out = np.array(background, dtype=np.float64, copy=True)
    for start, n, freq, amp in bursts:
        out[start : start + n] += make_sine(freq, amp, n, sample_rate)
    return out


def alternating_burst(n_samples: int, high: float = 10.0, low: float = 5.0) -> np.ndarray:
    """``high, -low, high, -low, ...``: rectifies to a train of strict peaks."""
    out = np.full(n_samples, -float(low))
    out[::2] = float(high)
    return out


def fast_ripple_sos(sample_rate: float = FS, order: int = 4) -> np.ndarray:
    return butter(order, FAST_RIPPLE_BAND, btype="band", fs=sample_rate, output="sos")


def fast_ripple_ba(sample_rate: float = FS, order: int = 4) -> Tuple[np.ndarray, np.ndarray]:
    b, a = butter(order, FAST_RIPPLE_BAND, btype="band", fs=sample_rate, output="ba")
    return b, a


def identity_filter(x: np.ndarray) -> np.ndarray:
    """Pass-through filterer: detection then runs directly on the raw signal."""
    return np.asarray(x, dtype=np.float64).copy()
