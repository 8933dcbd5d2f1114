"""Nanosecond-resolution durations and the simulation's virtual clock."""

from dataclasses import dataclass
from functools import total_ordering
from typing import Union

NANOS_PER_MICROSECOND = 1_000
NANOS_PER_MILLISECOND = 1_000_000
NANOS_PER_SECOND = 1_000_000_000

Number = Union[int, float]


@total_ordering
@dataclass(frozen=True)
class Duration:
    """A signed span of simulated time, stored as whole nanoseconds."""

    nanos: int = 0

    @classmethod
    def nanoseconds(cls, value: int) -> "Duration":
        return cls(int(value))

    @classmethod
    def microseconds(cls, value: Number) -> "Duration":
        return cls(round(value * NANOS_PER_MICROSECOND))

    @classmethod
    def milliseconds(cls, value: Number) -> "Duration":
        return cls(round(value * NANOS_PER_MILLISECOND))

    @classmethod
    def seconds(cls, value: Number) -> "Duration":
        return cls(round(value * NANOS_PER_SECOND))

    @classmethod
    def minutes(cls, value: Number) -> "Duration":
        return cls(round(value * 60 * NANOS_PER_SECOND))

    def in_milliseconds(self) -> float:
        return self.nanos / NANOS_PER_MILLISECOND

    def in_seconds(self) -> float:
        return self.nanos / NANOS_PER_SECOND

    def in_whole_microseconds(self) -> int:
        # Truncate toward zero so negative drift reports symmetrically.
        return int(self.nanos / NANOS_PER_MICROSECOND)

    def __add__(self, other: "Duration") -> "Duration":
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(self.nanos + other.nanos)

    def __sub__(self, other: "Duration") -> "Duration":
        if not isinstance(other, Duration):
            return NotImplemented
        return Duration(self.nanos - other.nanos)

    def __neg__(self) -> "Duration":
        return Duration(-self.nanos)

    def __abs__(self) -> "Duration":
        return Duration(abs(self.nanos))

    def __mul__(self, factor: Number) -> "Duration":
        if not isinstance(factor, (int, float)):
            return NotImplemented
        return Duration(round(self.nanos * factor))

    __rmul__ = __mul__

    def __truediv__(self, other):
        """Divide by a number (giving a Duration) or by a Duration (giving a ratio)."""
        if isinstance(other, Duration):
            return self.nanos / other.nanos
        if isinstance(other, (int, float)):
            return Duration(round(self.nanos / other))
        return NotImplemented

    def __lt__(self, other: "Duration") -> bool:
        if not isinstance(other, Duration):
            return NotImplemented
        return self.nanos < other.nanos

    def __str__(self) -> str:
        return f"{self.in_milliseconds():.3f}ms"


Duration.ZERO = Duration(0)


class VirtualClock:
    """The only source of "now" for a simulation run."""

    def __init__(self, start: Duration = Duration.ZERO):
        self._now = start

    @property
    def now(self) -> Duration:
        return self._now

    def advance(self, step: Duration):
        """Move time forward by a strictly positive step."""
        if step <= Duration.ZERO:
            raise ValueError(f"clock step must be positive, got {step}")
        self._now = self._now + step

    def __str__(self):
        return f"VirtualClock(now={self._now})"
