"""Default scenario: two Wi-Fi players with one frame of delay for a minute."""

from lagsim.config import ClientConfig, SimulationConfig
from lagsim.duration import Duration
from lagsim.latency import WIFI
from lagsim.simulation import Simulation, print_summary


def run_default_simulation():
    """Simulate a one-minute session between two players on Wi-Fi."""
    config = SimulationConfig(
        clients=[
            ClientConfig(client_id=0, frame_delay=1, ping=WIFI),
            ClientConfig(client_id=1, frame_delay=1, ping=WIFI),
        ],
        time_step=Duration.microseconds(10),
        horizon=Duration.minutes(1),
        seed=42,
    )
    summary = Simulation(config).run()
    print_summary(summary)


if __name__ == "__main__":
    run_default_simulation()
