import pytest

from lagsim.duration import Duration
from lagsim.events import SERVER, EventRecorder


def test_rows_report_times_in_milliseconds():
    recorder = EventRecorder()
    recorder.frame_advanced(Duration.milliseconds(17), SERVER, 3)
    recorder.interval("wait", Duration.milliseconds(10), Duration.milliseconds(17), 0, 1)

    assert recorder.rows("frames") == [{"timestamp": 17.0, "source": "server", "frame_number": 3}]
    assert recorder.rows("intervals") == [
        {"kind": "wait", "start": 10.0, "end": 17.0, "client_id": 0, "frame_number": 1}
    ]


def test_drift_is_reported_in_milliseconds_and_lag_is_floored():
    recorder = EventRecorder()
    recorder.drift_sample(Duration.ZERO, 1, Duration.microseconds(-2500))
    recorder.lag_sample(Duration.ZERO, 1, 4, Duration.milliseconds(-3))

    assert recorder.drift[0].induced_drift_ms == -2.5
    assert recorder.lag[0].lag_ms == 0.0


def test_disabled_recorder_keeps_nothing():
    recorder = EventRecorder(enabled=False)
    recorder.frame_advanced(Duration.ZERO, 0, 1)
    recorder.drift_sample(Duration.ZERO, 0, Duration.ZERO)
    assert recorder.frames == [] and recorder.drift == []


def test_unknown_kind_is_rejected():
    with pytest.raises(ValueError):
        EventRecorder().rows("enabled")
