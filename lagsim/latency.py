"""Latency distributions used to draw packet transit times."""

from dataclasses import dataclass
import math
import random
from typing import Union

from lagsim.duration import Duration


@dataclass(frozen=True)
class UniformLatency:
    """Latency drawn uniformly from a fixed range."""

    low: Duration
    high: Duration

    def __post_init__(self):
        if self.low < Duration.ZERO:
            raise ValueError(f"latency cannot be negative: {self.low}")
        if self.low > self.high:
            raise ValueError(f"empty latency range: {self.low}..{self.high}")

    def sample(self, rng: random.Random, now: Duration) -> Duration:
        if self.low == self.high:
            return self.low
        return Duration.nanoseconds(rng.randrange(self.low.nanos, self.high.nanos))


@dataclass(frozen=True)
class NormalLatency:
    """Gaussian latency, floored at zero."""

    mean: Duration
    stdev: Duration

    def __post_init__(self):
        if self.stdev < Duration.ZERO:
            raise ValueError(f"standard deviation cannot be negative: {self.stdev}")

    def sample(self, rng: random.Random, now: Duration) -> Duration:
        value = rng.gauss(self.mean.in_milliseconds(), self.stdev.in_milliseconds())
        return max(Duration.milliseconds(value), Duration.ZERO)


@dataclass(frozen=True)
class LogNormalLatency:
    """Log-normal latency with the given mean and standard deviation.

    The parameters describe the resulting latency, not the underlying
    normal distribution, so measured ping statistics can be used as-is.
    """

    mean: Duration
    stdev: Duration

    def __post_init__(self):
        if self.mean <= Duration.ZERO:
            raise ValueError(f"log-normal mean must be positive: {self.mean}")
        if self.stdev < Duration.ZERO:
            raise ValueError(f"standard deviation cannot be negative: {self.stdev}")

    def sample(self, rng: random.Random, now: Duration) -> Duration:
        mean = self.mean.in_milliseconds()
        stdev = self.stdev.in_milliseconds()

        sigma_squared = math.log(stdev * stdev / (mean * mean) + 1)
        mu = math.log(mean) - 0.5 * sigma_squared
        return Duration.milliseconds(rng.lognormvariate(mu, math.sqrt(sigma_squared)))


@dataclass(frozen=True)
class SpikeLatency:
    """Base latency that switches to a spike distribution for a time window."""

    base: "LatencyDistribution"
    spike: "LatencyDistribution"
    start: Duration
    end: Duration

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError(f"spike window ends before it starts: {self.start}..{self.end}")

    def sample(self, rng: random.Random, now: Duration) -> Duration:
        if self.start <= now < self.end:
            return self.spike.sample(rng, now)
        return self.base.sample(rng, now)


LatencyDistribution = Union[UniformLatency, NormalLatency, LogNormalLatency, SpikeLatency]


def fixed(value: Duration) -> UniformLatency:
    """A latency that never varies."""
    return UniformLatency(value, value)


# Ping measurements taken on a home network.
WIFI = LogNormalLatency(mean=Duration.milliseconds(10.424), stdev=Duration.milliseconds(8.193))
WIRED = LogNormalLatency(mean=Duration.milliseconds(6.731), stdev=Duration.milliseconds(1.920))
