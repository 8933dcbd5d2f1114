"""Players configured with different frame delays still play in lockstep."""

from lagsim.config import ClientConfig, SimulationConfig
from lagsim.duration import Duration
from lagsim.latency import WIRED
from lagsim.simulation import Simulation, print_summary


def run_mismatched_delay_simulation():
    """Three players with frame delays 0, 1 and 2."""
    config = SimulationConfig(
        clients=[
            ClientConfig(client_id=0, frame_delay=0, ping=WIRED),
            ClientConfig(client_id=1, frame_delay=1, ping=WIRED),
            ClientConfig(client_id=2, frame_delay=2, ping=WIRED),
        ],
        time_step=Duration.microseconds(100),
        horizon=Duration.seconds(10),
    )
    simulation = Simulation(config)

    for client in simulation.clients:
        print(
            f"Client {client.client_id}: delay={client.frame_delay}, "
            f"first frame to send from={client.first_frame_to_send_from}"
        )

    summary = simulation.run()
    print_summary(summary)


if __name__ == "__main__":
    run_mismatched_delay_simulation()
