from __future__ import annotations

import pytest

from reviewflow.config import (
    ConfigurationError,
    CoordinatorConfig,
    RateLimit,
    SimulatedBackendConfig,
    env_float,
    env_int,
    get_backend_config,
    get_coordinator_config,
)

BACKEND_VARS = (
    "REVIEWFLOW_MIN_LATENCY_MS",
    "REVIEWFLOW_MAX_LATENCY_MS",
    "REVIEWFLOW_FAILURE_RATE",
    "REVIEWFLOW_RATE_LIMIT",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in (*BACKEND_VARS, "REVIEWFLOW_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_env_float_handles_blank_and_invalid_values(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("EXAMPLE_FLOAT", "   ")
    assert env_float("EXAMPLE_FLOAT", 1.5) == 1.5

    clean_env.setenv("EXAMPLE_FLOAT", " 0.25 ")
    assert env_float("EXAMPLE_FLOAT") == 0.25

    clean_env.setenv("EXAMPLE_FLOAT", "fast")
    with pytest.raises(ConfigurationError, match="EXAMPLE_FLOAT"):
        env_float("EXAMPLE_FLOAT")


def test_env_int_rejects_floats(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("EXAMPLE_INT", "2.5")

    with pytest.raises(ConfigurationError):
        env_int("EXAMPLE_INT")


def test_backend_config_defaults(clean_env: pytest.MonkeyPatch) -> None:
    config = get_backend_config()

    assert config == SimulatedBackendConfig()
    assert config.min_latency_ms == 300
    assert config.max_latency_ms == 1200
    assert config.failure_rate == pytest.approx(0.08)
    assert config.ratelimit is None


def test_backend_config_from_environment(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("REVIEWFLOW_MIN_LATENCY_MS", "0")
    clean_env.setenv("REVIEWFLOW_MAX_LATENCY_MS", "10")
    clean_env.setenv("REVIEWFLOW_FAILURE_RATE", "0.5")
    clean_env.setenv("REVIEWFLOW_RATE_LIMIT", "20")

    config = get_backend_config()

    assert config.min_latency_ms == 0
    assert config.max_latency_ms == 10
    assert config.failure_rate == 0.5
    assert config.ratelimit == RateLimit(max_calls=20, per_seconds=1.0)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"min_latency_ms": -1},
        {"min_latency_ms": 100, "max_latency_ms": 50},
        {"failure_rate": 1.5},
        {"ratelimit": RateLimit(max_calls=0, per_seconds=1.0)},
    ],
)
def test_backend_config_validation(kwargs: dict[str, object]) -> None:
    with pytest.raises(ConfigurationError):
        SimulatedBackendConfig(**kwargs)  # type: ignore[arg-type]


def test_coordinator_config(clean_env: pytest.MonkeyPatch) -> None:
    assert get_coordinator_config().timeout_seconds is None

    clean_env.setenv("REVIEWFLOW_TIMEOUT_SECONDS", "2.5")
    assert get_coordinator_config().timeout_seconds == 2.5

    with pytest.raises(ConfigurationError):
        CoordinatorConfig(timeout_seconds=0)

