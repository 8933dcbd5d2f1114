"""Fixed-step driver that runs the server and clients to a time horizon."""

from dataclasses import dataclass
from typing import List

from asimpy import Environment, Process

from lagsim.client import Client, ClientPerceivedLag
from lagsim.config import RunContext, SimulationConfig
from lagsim.duration import Duration, VirtualClock
from lagsim.errors import DeadlockError
from lagsim.registry import ClientRegistry
from lagsim.server import Server

# Drift tolerated per minute of play before a session counts as laggy.
LAGGY_FRAMES_PER_MINUTE = 30


@dataclass
class ClientSummary:
    """End-of-run statistics for one client."""

    client_id: int
    frame_number: int
    total_drift: Duration
    lag_leeway: Duration
    perceived_lag: ClientPerceivedLag


@dataclass
class SimulationSummary:
    """End-of-run statistics for the whole session."""

    elapsed: Duration
    ticks: int
    single_frame_duration: Duration
    clients: List[ClientSummary]
    server_total_drift: Duration

    @property
    def is_laggy(self) -> bool:
        """True if the server drifted more than the per-minute allowance."""
        allowance = self.single_frame_duration * LAGGY_FRAMES_PER_MINUTE
        allowance = allowance * (self.elapsed / Duration.minutes(1))
        return abs(self.server_total_drift) > allowance

    def client(self, client_id: int) -> ClientSummary:
        for summary in self.clients:
            if summary.client_id == client_id:
                return summary
        raise KeyError(client_id)


class Simulation:
    """One run: a clock, a server and its clients."""

    def __init__(self, config: SimulationConfig):
        self.config = config
        self.context = RunContext.from_config(config)
        self.clock = VirtualClock()
        self.ticks = 0

        self.registry = ClientRegistry()
        for client_config in config.clients:
            self.registry.add(
                Client(
                    client_config.client_id,
                    client_config.frame_delay,
                    client_config.ping,
                    self.context,
                )
            )
        self.server = Server(self.registry, self.context)
        for client in self.registry:
            client.attach(self.server, self.registry)

    @property
    def clients(self) -> List[Client]:
        return list(self.registry)

    @property
    def recorder(self):
        return self.context.recorder

    def step(self):
        """Run one tick: the server, then every client in order, then advance time."""
        self.server.tick(self.clock)
        for client in self.registry:
            client.tick(self.clock)
        self.clock.advance(self.config.time_step)
        self.ticks += 1

    def run(self) -> SimulationSummary:
        """Run to the horizon, check for deadlock, and summarize."""
        env = Environment()
        Driver(env, self)
        # Environment time only paces the driver; stop just after its last tick.
        env.run(until=(self.config.horizon + self.config.time_step * 2).in_seconds())
        return self.finish()

    def finish(self) -> SimulationSummary:
        """Raise if any client is stuck, otherwise report statistics."""
        now = self.clock.now
        unhealthy = [client.client_id for client in self.registry if not client.is_healthy(now)]
        if unhealthy:
            raise DeadlockError(unhealthy)
        self.server.lagstat(now)
        return self.summary()

    def summary(self) -> SimulationSummary:
        return SimulationSummary(
            elapsed=self.clock.now,
            ticks=self.ticks,
            single_frame_duration=self.config.single_frame_duration,
            clients=[
                ClientSummary(
                    client_id=client.client_id,
                    frame_number=client.frame_number,
                    total_drift=client.server_data.total_drift,
                    lag_leeway=client.server_data.lag_leeway,
                    perceived_lag=client.perceived_lag,
                )
                for client in self.registry
            ],
            server_total_drift=self.server.total_drift,
        )


class Driver(Process):
    """Steps a simulation once per time step until its horizon."""

    def init(self, simulation: Simulation):
        self.simulation = simulation

    async def run(self):
        # The VirtualClock is authoritative; asimpy time only paces this loop.
        simulation = self.simulation
        horizon = simulation.config.horizon
        step = simulation.config.time_step.in_seconds()
        while simulation.clock.now <= horizon:
            simulation.step()
            await self.timeout(step)


def print_summary(summary: SimulationSummary):
    """Print a human-readable report of a finished run."""
    print("\n=== Lag Simulation Summary ===")
    print(f"Simulated time: {summary.elapsed.in_seconds():.3f}s ({summary.ticks} ticks)")
    print(f"Server drift: {summary.server_total_drift}")
    print(f"Laggy session: {'yes' if summary.is_laggy else 'no'}")

    for client in summary.clients:
        lag = client.perceived_lag
        print(f"\nClient {client.client_id}:")
        print(f"  Frame reached: {client.frame_number}")
        print(f"  Total drift: {client.total_drift}")
        print(f"  Lag leeway: {client.lag_leeway}")
        print(
            f"  Lag spikes: {lag.total_lag_spikes} "
            f"(>5ms={lag.lag_spikes_over_5ms}, >10ms={lag.lag_spikes_over_10ms}, "
            f">15ms={lag.lag_spikes_over_15ms}, >20ms={lag.lag_spikes_over_20ms})"
        )
