import pytest

from conftest import ms
from lagsim.config import ClientConfig, RunContext, SimulationConfig
from lagsim.duration import Duration
from lagsim.latency import fixed

PING = fixed(ms(10))


def test_defaults_match_a_sixty_fps_minute():
    config = SimulationConfig(clients=[ClientConfig(0, 1, PING)])
    assert config.time_step == Duration.microseconds(10)
    assert config.single_frame_duration == Duration.seconds(1) / 60
    assert config.horizon == Duration.minutes(1)


def test_context_is_seeded_from_config():
    config = SimulationConfig(clients=[ClientConfig(0, 1, PING)], seed=3)
    first = RunContext.from_config(config).rng.random()
    second = RunContext.from_config(config).rng.random()
    assert first == second


@pytest.mark.parametrize(
    "overrides",
    [
        {"clients": []},
        {"clients": [ClientConfig(0, 1, PING), ClientConfig(0, 2, PING)]},
        {"time_step": Duration.ZERO},
        {"time_step": ms(20)},
        {"horizon": ms(-1)},
    ],
)
def test_invalid_configuration_is_rejected(overrides):
    settings = {"clients": [ClientConfig(0, 1, PING)]}
    settings.update(overrides)
    with pytest.raises(ValueError):
        SimulationConfig(**settings)


def test_negative_frame_delay_is_rejected():
    with pytest.raises(ValueError):
        ClientConfig(0, -1, PING)
