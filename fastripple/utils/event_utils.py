import statistics
from typing import Any, Dict

import numpy as np


def events_to_seconds(events, sfreq: float) -> np.ndarray:
    """
    Convert inclusive sample windows (n_events, 2) to seconds [start, end).

    The end is taken at the edge of the last sample, so ``end - start`` equals
    the event's sample count divided by ``sfreq``.
    """
    ev = np.asarray(events, dtype=np.float64).reshape(-1, 2)
    out = ev.copy()
    out[:, 0] = ev[:, 0] / float(sfreq)
    out[:, 1] = (ev[:, 1] + 1.0) / float(sfreq)
    return out


def summarize_events(events, sfreq: float) -> Dict[str, Any]:
    """
    Event count, durations and inter-event intervals (milliseconds).

    Intervals are measured from one event's last sample to the next event's
    first sample. Mean/std are 0 where undefined.
    """
    ev = np.asarray(events, dtype=np.int64).reshape(-1, 2)
    count = int(ev.shape[0])
    to_ms = 1e3 / float(sfreq)

    durations = [float((e - s + 1) * to_ms) for s, e in ev.tolist()]
    if count > 0:
        mean_duration = sum(durations) / count
        std_duration = statistics.stdev(durations) if count > 1 else 0.0
    else:
        mean_duration, std_duration = 0.0, 0.0

    intervals = [float((ev[i, 0] - ev[i - 1, 1]) * to_ms) for i in range(1, count)]
    if len(intervals) > 0:
        mean_interval = sum(intervals) / len(intervals)
        std_interval = statistics.stdev(intervals) if len(intervals) > 1 else 0.0
    else:
        mean_interval, std_interval = 0.0, 0.0

    return {
        "count": count,
        "durations_ms": durations,
        "mean_duration_ms": float(mean_duration),
        "std_duration_ms": float(std_duration),
        "intervals_ms": intervals,
        "mean_interval_ms": float(mean_interval),
        "std_interval_ms": float(std_interval),
    }
