"""Fatal conditions that abort a simulation run."""

from typing import List


class SimulationError(Exception):
    """Base class for errors that halt a simulation."""


class SetupError(SimulationError):
    """A component was ticked before it was wired to its peers."""


class ProtocolViolation(SimulationError):
    """An invariant of the synchronization protocol was broken mid-run."""


class DeadlockError(SimulationError):
    """One or more clients stopped advancing before the run ended."""

    def __init__(self, client_ids: List[int]):
        self.client_ids = client_ids
        super().__init__(
            f"clients {client_ids} are unhealthy; a deadlock likely occurred"
        )
