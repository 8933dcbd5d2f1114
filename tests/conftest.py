import random

import pytest

from lagsim.config import ClientConfig, RunContext, SimulationConfig
from lagsim.duration import Duration
from lagsim.latency import fixed
from lagsim.simulation import Simulation

FRAME = Duration.seconds(1) / 60
TICK = Duration.milliseconds(1)


def ms(value) -> Duration:
    return Duration.milliseconds(value)


def make_simulation(
    frame_delays=(1, 1),
    ping=None,
    pings=None,
    time_step=TICK,
    frame=FRAME,
    horizon=ms(200),
    seed=42,
) -> Simulation:
    """Build a simulation with one client per frame delay, ids 0..n-1."""
    if pings is None:
        pings = [ping or fixed(ms(10))] * len(frame_delays)
    config = SimulationConfig(
        clients=[
            ClientConfig(client_id=i, frame_delay=delay, ping=latency)
            for i, (delay, latency) in enumerate(zip(frame_delays, pings))
        ],
        time_step=time_step,
        single_frame_duration=frame,
        horizon=horizon,
        seed=seed,
    )
    return Simulation(config)


def step_until(simulation: Simulation, until: Duration, check=None):
    """Step tick by tick while the clock is at or before `until`."""
    while simulation.clock.now <= until:
        simulation.step()
        if check is not None:
            check(simulation)


@pytest.fixture
def context():
    return RunContext(single_frame_duration=FRAME, time_step=TICK, rng=random.Random(1))
