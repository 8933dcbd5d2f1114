"""One wired player suffers a latency spike while the others stay steady."""

from lagsim.config import ClientConfig, SimulationConfig
from lagsim.duration import Duration
from lagsim.latency import WIRED, SpikeLatency, fixed
from lagsim.simulation import Simulation, print_summary


def run_spike_simulation():
    """Three players; player 0's ping jumps to 100ms for two seconds."""
    spiky = SpikeLatency(
        base=WIRED,
        spike=fixed(Duration.milliseconds(100)),
        start=Duration.seconds(4),
        end=Duration.seconds(6),
    )
    config = SimulationConfig(
        clients=[
            ClientConfig(client_id=0, frame_delay=2, ping=spiky),
            ClientConfig(client_id=1, frame_delay=2, ping=WIRED),
            ClientConfig(client_id=2, frame_delay=2, ping=WIRED),
        ],
        time_step=Duration.microseconds(100),
        horizon=Duration.seconds(10),
    )
    simulation = Simulation(config)
    summary = simulation.run()
    print_summary(summary)

    spikes = [row for row in simulation.recorder.rows("lag") if row["lag_ms"] > 5.0]
    print(f"\nFrames advanced more than 5ms late: {len(spikes)}")


if __name__ == "__main__":
    run_spike_simulation()
