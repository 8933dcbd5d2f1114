"""Time-stamped records emitted for external charting."""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Union

from lagsim.duration import Duration

SERVER = "server"


@dataclass(frozen=True)
class FrameAdvanced:
    """A client moved to a new frame, or the server fanned one out."""

    timestamp: Duration
    source: Union[int, str]  # client id or SERVER
    frame_number: int


@dataclass(frozen=True)
class DriftSample:
    """Total drift the server has induced on a client so far."""

    timestamp: Duration
    client_id: int
    induced_drift_ms: float


@dataclass(frozen=True)
class LagSample:
    """How late a client advanced to a frame that needed server data."""

    timestamp: Duration
    client_id: int
    frame_number: int
    lag_ms: float


@dataclass(frozen=True)
class PacketInterval:
    """A span on the timeline: a packet in flight or a client waiting."""

    kind: str  # "to_server", "to_client" or "wait"
    start: Duration
    end: Duration
    client_id: int
    frame_number: int


@dataclass
class EventRecorder:
    """Collects observability records for one run."""

    enabled: bool = True
    frames: List[FrameAdvanced] = field(default_factory=list)
    drift: List[DriftSample] = field(default_factory=list)
    lag: List[LagSample] = field(default_factory=list)
    intervals: List[PacketInterval] = field(default_factory=list)

    def frame_advanced(self, timestamp: Duration, source: Union[int, str], frame_number: int):
        if self.enabled:
            self.frames.append(FrameAdvanced(timestamp, source, frame_number))

    def drift_sample(self, timestamp: Duration, client_id: int, total_drift: Duration):
        if self.enabled:
            drift_ms = total_drift.in_whole_microseconds() / 1_000.0
            self.drift.append(DriftSample(timestamp, client_id, drift_ms))

    def lag_sample(self, timestamp: Duration, client_id: int, frame_number: int, lag: Duration):
        if self.enabled:
            lag_ms = max(lag.in_milliseconds(), 0.0)
            self.lag.append(LagSample(timestamp, client_id, frame_number, lag_ms))

    def interval(self, kind: str, start: Duration, end: Duration, client_id: int, frame_number: int):
        if self.enabled:
            self.intervals.append(PacketInterval(kind, start, end, client_id, frame_number))

    def rows(self, kind: str) -> List[Dict[str, Any]]:
        """Flatten one kind of record into dicts with millisecond times."""
        if kind not in ("frames", "drift", "lag", "intervals"):
            raise ValueError(f"unknown record kind: {kind}")
        result = []
        for record in getattr(self, kind):
            row = {}
            for column in fields(record):
                value = getattr(record, column.name)
                if isinstance(value, Duration):
                    value = value.in_milliseconds()
                row[column.name] = value
            result.append(row)
        return result
