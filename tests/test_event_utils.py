import numpy as np
import pytest

from fastripple.utils.event_utils import events_to_seconds, summarize_events


def test_events_to_seconds_inclusive_end():
    out = events_to_seconds(np.array([[0, 9], [100, 119]]), 1000.0)
    np.testing.assert_allclose(out, [[0.0, 0.010], [0.100, 0.120]])


def test_events_to_seconds_empty():
    out = events_to_seconds(np.zeros((0, 2), dtype=np.int64), 2000.0)
    assert out.shape == (0, 2)


def test_summarize_events():
    events = np.array([[0, 9], [20, 39], [60, 69]])
    summary = summarize_events(events, 1000.0)

    assert summary["count"] == 3
    assert summary["durations_ms"] == pytest.approx([10.0, 20.0, 10.0])
    assert summary["mean_duration_ms"] == pytest.approx(40.0 / 3.0)
    assert summary["std_duration_ms"] == pytest.approx(np.std([10.0, 20.0, 10.0], ddof=1))
    # end-of-event to next start
    assert summary["intervals_ms"] == pytest.approx([11.0, 21.0])
    assert summary["mean_interval_ms"] == pytest.approx(16.0)
    assert summary["std_interval_ms"] == pytest.approx(np.std([11.0, 21.0], ddof=1))


@pytest.mark.parametrize("events", [np.zeros((0, 2), dtype=np.int64), [[5, 14]]])
def test_summarize_events_degenerate(events):
    summary = summarize_events(events, 1000.0)
    assert summary["std_duration_ms"] == 0.0
    assert summary["intervals_ms"] == []
    assert summary["mean_interval_ms"] == 0.0
    assert summary["std_interval_ms"] == 0.0
