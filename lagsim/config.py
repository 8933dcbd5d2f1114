"""Scenario configuration and the per-run context shared by components."""

from dataclasses import dataclass, field
import random
from typing import List

from lagsim.duration import Duration
from lagsim.events import EventRecorder
from lagsim.latency import LatencyDistribution


@dataclass(frozen=True)
class ClientConfig:
    """One peer in a scenario."""

    client_id: int
    frame_delay: int
    ping: LatencyDistribution

    def __post_init__(self):
        if self.frame_delay < 0:
            raise ValueError(
                f"client {self.client_id}: frame delay cannot be negative ({self.frame_delay})"
            )


@dataclass
class SimulationConfig:
    """Everything that is fixed for the duration of one run."""

    clients: List[ClientConfig]
    time_step: Duration = Duration.microseconds(10)
    single_frame_duration: Duration = Duration.seconds(1) / 60
    horizon: Duration = Duration.minutes(1)
    seed: int = 42
    log_debug: bool = False
    record_events: bool = True

    def __post_init__(self):
        if not self.clients:
            raise ValueError("a simulation needs at least one client")
        ids = [client.client_id for client in self.clients]
        if len(set(ids)) != len(ids):
            raise ValueError(f"client ids must be unique: {ids}")
        if self.time_step <= Duration.ZERO:
            raise ValueError(f"time step must be positive: {self.time_step}")
        if self.time_step >= self.single_frame_duration:
            raise ValueError(
                f"time step {self.time_step} must be shorter than a frame "
                f"({self.single_frame_duration})"
            )
        if self.horizon < Duration.ZERO:
            raise ValueError(f"horizon cannot be negative: {self.horizon}")


@dataclass
class RunContext:
    """Per-run parameters and shared services handed to every component."""

    single_frame_duration: Duration
    time_step: Duration
    rng: random.Random
    recorder: EventRecorder = field(default_factory=EventRecorder)
    log_debug: bool = False

    @classmethod
    def from_config(cls, config: SimulationConfig) -> "RunContext":
        return cls(
            single_frame_duration=config.single_frame_duration,
            time_step=config.time_step,
            rng=random.Random(config.seed),
            recorder=EventRecorder(enabled=config.record_events),
            log_debug=config.log_debug,
        )
