import random

import pytest

from lagsim.duration import Duration
from lagsim.latency import (
    WIFI,
    LogNormalLatency,
    NormalLatency,
    SpikeLatency,
    UniformLatency,
    fixed,
)

NOW = Duration.ZERO


def ms(value):
    return Duration.milliseconds(value)


def test_fixed_latency_never_varies():
    rng = random.Random(0)
    latency = fixed(ms(12))
    assert {latency.sample(rng, NOW) for _ in range(50)} == {ms(12)}


def test_uniform_latency_stays_in_half_open_range():
    rng = random.Random(0)
    latency = UniformLatency(ms(5), ms(10))
    samples = [latency.sample(rng, NOW) for _ in range(1000)]
    assert all(ms(5) <= sample < ms(10) for sample in samples)
    assert len(set(samples)) > 1


def test_normal_latency_is_floored_at_zero():
    rng = random.Random(0)
    latency = NormalLatency(mean=ms(-50), stdev=ms(1))
    assert all(latency.sample(rng, NOW) == Duration.ZERO for _ in range(100))


def test_lognormal_latency_matches_requested_mean():
    rng = random.Random(0)
    latency = LogNormalLatency(mean=ms(10), stdev=ms(2))
    samples = [latency.sample(rng, NOW).in_milliseconds() for _ in range(20_000)]
    assert all(sample > 0 for sample in samples)
    assert sum(samples) / len(samples) == pytest.approx(10, rel=0.05)


def test_spike_latency_applies_only_inside_window():
    rng = random.Random(0)
    latency = SpikeLatency(base=fixed(ms(10)), spike=fixed(ms(100)), start=ms(100), end=ms(300))
    assert latency.sample(rng, ms(99)) == ms(10)
    assert latency.sample(rng, ms(100)) == ms(100)
    assert latency.sample(rng, ms(299)) == ms(100)
    assert latency.sample(rng, ms(300)) == ms(10)


def test_same_seed_gives_same_samples():
    first = [WIFI.sample(random.Random(42), NOW) for _ in range(3)]
    second = [WIFI.sample(random.Random(42), NOW) for _ in range(3)]
    assert first == second


@pytest.mark.parametrize(
    "build",
    [
        lambda: UniformLatency(ms(-1), ms(5)),
        lambda: UniformLatency(ms(10), ms(5)),
        lambda: NormalLatency(ms(10), ms(-1)),
        lambda: LogNormalLatency(Duration.ZERO, ms(1)),
        lambda: LogNormalLatency(ms(10), ms(-1)),
        lambda: SpikeLatency(fixed(ms(1)), fixed(ms(2)), ms(10), ms(5)),
    ],
)
def test_invalid_parameters_are_rejected(build):
    with pytest.raises(ValueError):
        build()
