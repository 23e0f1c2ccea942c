"""
Fast Ripple Detector (moving RMS envelope + peak-count validation)

Adapted from:
Staba, R. J., Wilson, C. L., Bragin, A., Fried, I., & Engel Jr, J. (2002).
Quantitative analysis of high-frequency oscillations (80-500 Hz) recorded in
human epileptic hippocampus and entorhinal cortex. J Neurophysiol 88(4), 1743-1752.

Pipeline (single channel, whole signal in memory):
1) Zero-phase band-pass filter (caller supplies the filter)
2) Envelope: 3 ms moving mean of |filtered|
3) Segmentation: runs with envelope >= mean + std_rms * std, at least 6 ms long
4) Merge segments separated by <= 10 ms
5) Keep segments whose rectified *raw* chunk has >= 6 peaks above
   mean(|filtered|) + std_peaks * std(|filtered|)

Events are 0-based, inclusive [start, end] sample indices.
Standard deviations use ddof=1 (unbiased) unless configured otherwise.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

import numpy as np
from scipy.signal import find_peaks

from .preprocessing import (
    FilterSpec,
    InvalidInputError,
    apply_filter,
    as_signal,
    check_sfreq,
    ms_to_samples,
    rectified_envelope,
)
from .utils.event_utils import events_to_seconds
from .utils.logging_utils import get_run_logger, log_params, log_section

logger = logging.getLogger(__name__)

__all__ = [
    "FastRippleConfig",
    "FastRippleDetector",
    "FastRippleResult",
    "InvalidInputError",
    "PeakFinder",
    "ScipyPeakFinder",
    "compute_thresholds",
    "count_peaks",
    "detect_fast_ripples",
    "find_segments",
    "merge_segments",
    "validate_segments",
]


def _empty_events() -> np.ndarray:
    return np.zeros((0, 2), dtype=np.int64)


@dataclass(frozen=True)
class FastRippleConfig:
    """Configuration for Fast Ripple detection."""

    # RMS threshold: mean(envelope) + std_rms * std(envelope)
    std_rms: float = 5.0
    # Peak threshold: mean(|filtered|) + std_peaks * std(|filtered|)
    std_peaks: float = 3.0

    # Envelope moving-mean window (ms)
    rms_window_ms: float = 3.0

    # Event post-processing
    min_duration_ms: float = 6.0
    max_gap_ms: float = 10.0
    min_peaks: int = 6

    # 1 -> unbiased (n-1) standard deviation, 0 -> population
    std_ddof: int = 1

    def __post_init__(self) -> None:
        for name in ("std_rms", "std_peaks"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ValueError(f"{name} must be a finite number, got {value!r}")
        for name in ("rms_window_ms", "min_duration_ms"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not value > 0:
                raise ValueError(f"{name} must be > 0, got {value!r}")
        if not isinstance(self.max_gap_ms, (int, float)) or not self.max_gap_ms >= 0:
            raise ValueError(f"max_gap_ms must be >= 0, got {self.max_gap_ms!r}")
        if isinstance(self.min_peaks, bool) or not isinstance(self.min_peaks, (int, np.integer)) or self.min_peaks < 0:
            raise ValueError(f"min_peaks must be a non-negative integer, got {self.min_peaks!r}")
        if self.std_ddof not in (0, 1):
            raise ValueError(f"std_ddof must be 0 or 1, got {self.std_ddof!r}")

    @classmethod
    def from_dict(cls, params: Mapping[str, Any]) -> "FastRippleConfig":
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(params) - known)
        if unknown:
            raise ValueError(f"Unknown FastRippleConfig keys: {unknown}. Valid keys: {sorted(known)}")
        return cls(**dict(params))

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclass
class FastRippleResult:
    """Detection output."""

    sfreq: float
    config: FastRippleConfig

    # (n_events, 2) int64, 0-based inclusive [start, end]
    events: np.ndarray

    threshold_rms: float
    peak_threshold: float

    # Peaks above peak_threshold in each kept event, shape (n_events,)
    peak_counts: np.ndarray

    # Stage sizes
    n_candidates: int = 0
    n_merged: int = 0

    meta: Dict = field(default_factory=dict)

    @property
    def n_events(self) -> int:
        return int(self.events.shape[0])

    @property
    def events_sec(self) -> np.ndarray:
        """Events in seconds, [start, end) with end at the last sample's edge."""
        return events_to_seconds(self.events, self.sfreq)


class PeakFinder:
    """
    Abstract interface for peak finding.

    Returns indices of local maxima of ``x`` whose value is strictly greater
    than ``height``.
    """

    def __call__(self, x: np.ndarray, height: float) -> np.ndarray:
        raise NotImplementedError


class ScipyPeakFinder(PeakFinder):
    """``scipy.signal.find_peaks`` with a strict minimum height."""

    def __call__(self, x: np.ndarray, height: float) -> np.ndarray:
        peaks, _ = find_peaks(x, height=height)
        # find_peaks keeps peaks equal to `height`
        return peaks[x[peaks] > height]


PeakFinderLike = Union[PeakFinder, Callable[[np.ndarray, float], np.ndarray]]


def _std(x: np.ndarray, ddof: int) -> float:
    if x.size <= ddof:
        return 0.0
    return float(np.std(x, ddof=ddof))


def compute_thresholds(
    envelope: np.ndarray,
    filtered: np.ndarray,
    std_rms: float,
    std_peaks: float,
    ddof: int = 1,
) -> Tuple[float, float]:
    """
    Whole-signal thresholds.

    Returns
    -------
    threshold_rms : float
        mean(envelope) + std_rms * std(envelope)
    peak_threshold : float
        mean(|filtered|) + std_peaks * std(|filtered|)
    """
    envelope = np.asarray(envelope, dtype=np.float64)
    rect = np.abs(np.asarray(filtered, dtype=np.float64))
    threshold_rms = float(np.mean(envelope)) + float(std_rms) * _std(envelope, ddof)
    peak_threshold = float(np.mean(rect)) + float(std_peaks) * _std(rect, ddof)
    return threshold_rms, peak_threshold


def find_segments(envelope: np.ndarray, threshold: float, min_length: int) -> np.ndarray:
    """
    Runs of consecutive samples with ``envelope >= threshold``.

    Returns an (n, 2) int64 array of inclusive [start, end] windows, ascending,
    keeping runs of at least ``min_length`` samples. No crossing -> (0, 2).
    """
    idx = np.flatnonzero(np.asarray(envelope) >= threshold)
    if idx.size == 0:
        return _empty_events()

    breaks = np.flatnonzero(np.diff(idx) != 1)
    starts = idx[np.concatenate(([0], breaks + 1))]
    ends = idx[np.concatenate((breaks, [idx.size - 1]))]
    keep = (ends - starts + 1) >= int(min_length)
    return np.column_stack([starts[keep], ends[keep]]).astype(np.int64)


def merge_segments(segments: np.ndarray, max_gap: int) -> np.ndarray:
    """
    Merge ascending, non-overlapping segments whose gap is <= ``max_gap`` samples.

    The gap between [s0, e0] and [s1, e1] is ``s1 - e0 - 1`` (samples strictly
    between them). A single pass reaches the fixed point: a merge only extends
    the last kept segment, which is then compared with the next one.
    """
    seg = np.asarray(segments, dtype=np.int64).reshape(-1, 2)
    if seg.shape[0] <= 1:
        return seg.copy()

    merged = []
    for s, e in seg.tolist():
        if merged and s - merged[-1][1] - 1 <= max_gap:
            merged[-1][1] = max(merged[-1][1], e)
        else:
            merged.append([s, e])
    return np.array(merged, dtype=np.int64)


def count_peaks(
    segments: np.ndarray,
    signal: np.ndarray,
    peak_threshold: float,
    peak_finder: Optional[PeakFinderLike] = None,
) -> np.ndarray:
    """Number of peaks above ``peak_threshold`` in |signal[start:end + 1]| per segment."""
    finder = peak_finder or ScipyPeakFinder()
    seg = np.asarray(segments, dtype=np.int64).reshape(-1, 2)
    x = np.asarray(signal, dtype=np.float64)

    counts = np.zeros((seg.shape[0],), dtype=np.int64)
    for i, (s, e) in enumerate(seg.tolist()):
        rectified = np.abs(x[s : e + 1])
        counts[i] = len(finder(rectified, float(peak_threshold)))
    return counts


def validate_segments(
    segments: np.ndarray,
    signal: np.ndarray,
    peak_threshold: float,
    min_peaks: int = 6,
    peak_finder: Optional[PeakFinderLike] = None,
) -> np.ndarray:
    """Keep segments with at least ``min_peaks`` peaks in the rectified raw signal."""
    seg = np.asarray(segments, dtype=np.int64).reshape(-1, 2)
    counts = count_peaks(seg, signal, peak_threshold, peak_finder)
    return seg[counts >= int(min_peaks)]


class FastRippleDetector:
    """
    Fast Ripple detector for one channel.

    Typical usage:
        sos = butter(4, [250, 500], btype="band", fs=2000, output="sos")
        res = FastRippleDetector(FastRippleConfig(std_rms=5)).detect(lfp, 2000, sos)
        res.events  # (n_events, 2) sample indices

    Stateless between calls; a single detector can be reused across channels.
    If ``run_name`` is given, a run summary is written to ``log_dir``.
    """

    def __init__(
        self,
        config: Optional[FastRippleConfig] = None,
        *,
        peak_finder: Optional[PeakFinderLike] = None,
        run_name: Optional[str] = None,
        log_dir: str = "logs",
    ):
        self.config = config or FastRippleConfig()
        self.peak_finder = peak_finder or ScipyPeakFinder()
        self.run_name = run_name
        self.log_dir = log_dir

    def detect(self, signal: Any, sfreq: float, band_pass: FilterSpec) -> FastRippleResult:
        """
        Detect Fast Ripples in ``signal`` sampled at ``sfreq`` Hz.

        Raises InvalidInputError for an empty/non-finite/multi-channel signal,
        a non-positive sampling rate, or a filter the signal is too short for.
        No events is a normal outcome (empty ``events``).
        """
        x = as_signal(signal)
        sfreq_ = check_sfreq(sfreq)
        cfg = self.config

        win = ms_to_samples(cfg.rms_window_ms, sfreq_)
        min_len = ms_to_samples(cfg.min_duration_ms, sfreq_)
        max_gap = ms_to_samples(cfg.max_gap_ms, sfreq_, minimum=0)

        run_logger = None
        if self.run_name:
            run_logger = get_run_logger(f"fast_ripple_{self.run_name}", output_dir=self.log_dir)
            log_section(run_logger, "FAST RIPPLE DETECTION START")
            log_params(run_logger, cfg.to_dict())
            run_logger.info("sfreq=%.3f", sfreq_)
            run_logger.info("n_samples=%d", int(x.shape[0]))

        filtered = apply_filter(x, band_pass)
        envelope = rectified_envelope(filtered, win)
        threshold_rms, peak_threshold = compute_thresholds(
            envelope, filtered, cfg.std_rms, cfg.std_peaks, ddof=cfg.std_ddof
        )

        meta: Dict = {
            "rms_window_samples": win,
            "min_length_samples": min_len,
            "max_gap_samples": max_gap,
            "index_base": 0,
            "degenerate_envelope": False,
        }

        if np.ptp(envelope) == 0:
            # Constant envelope: every sample sits exactly on the threshold.
            logger.warning(
                "Envelope has zero variance (constant value %.6g); no events reported.",
                float(envelope[0]),
            )
            meta["degenerate_envelope"] = True
            candidates = _empty_events()
        else:
            candidates = find_segments(envelope, threshold_rms, min_len)

        merged = merge_segments(candidates, max_gap)
        counts = count_peaks(merged, x, peak_threshold, self.peak_finder)
        keep = counts >= cfg.min_peaks
        events = merged[keep]

        logger.debug(
            "thresholds rms=%.6g peak=%.6g; candidates=%d merged=%d events=%d",
            threshold_rms,
            peak_threshold,
            candidates.shape[0],
            merged.shape[0],
            events.shape[0],
        )

        if run_logger is not None:
            log_section(run_logger, "FAST RIPPLE DETECTION SUMMARY")
            run_logger.info("threshold_rms=%.6g", threshold_rms)
            run_logger.info("peak_threshold=%.6g", peak_threshold)
            run_logger.info("degenerate_envelope=%s", meta["degenerate_envelope"])
            run_logger.info("candidates=%d", int(candidates.shape[0]))
            run_logger.info("merged=%d", int(merged.shape[0]))
            run_logger.info("events=%d", int(events.shape[0]))
            log_section(run_logger, "FAST RIPPLE DETECTION END")

        return FastRippleResult(
            sfreq=sfreq_,
            config=cfg,
            events=events,
            threshold_rms=threshold_rms,
            peak_threshold=peak_threshold,
            peak_counts=counts[keep],
            n_candidates=int(candidates.shape[0]),
            n_merged=int(merged.shape[0]),
            meta=meta,
        )


def detect_fast_ripples(
    signal: Any,
    sfreq: float,
    band_pass: FilterSpec,
    std_rms: Optional[float] = None,
    std_peaks: Optional[float] = None,
    *,
    config: Optional[FastRippleConfig] = None,
    peak_finder: Optional[PeakFinderLike] = None,
) -> np.ndarray:
    """
    Detect Fast Ripples and return their (n_events, 2) sample windows.

    ``std_rms`` / ``std_peaks`` override the config (defaults 5 and 3).
    Indices are 0-based and inclusive on both ends.
    """
    cfg = config or FastRippleConfig()
    overrides: Dict[str, float] = {}
    if std_rms is not None:
        overrides["std_rms"] = std_rms
    if std_peaks is not None:
        overrides["std_peaks"] = std_peaks
    if overrides:
        cfg = dataclasses.replace(cfg, **overrides)
    return FastRippleDetector(cfg, peak_finder=peak_finder).detect(signal, sfreq, band_pass).events
