"""Configuration for the simulated backing service."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_int
from .errors import ConfigurationError

DEFAULT_MIN_LATENCY_MS = 300.0
DEFAULT_MAX_LATENCY_MS = 1200.0
DEFAULT_FAILURE_RATE = 0.08


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class SimulatedBackendConfig:
    """Latency and failure characteristics of the simulated update service."""

    min_latency_ms: float = DEFAULT_MIN_LATENCY_MS
    max_latency_ms: float = DEFAULT_MAX_LATENCY_MS
    failure_rate: float = DEFAULT_FAILURE_RATE
    ratelimit: RateLimit | None = None

    def __post_init__(self) -> None:
        if self.min_latency_ms < 0:
            raise ConfigurationError("min_latency_ms must be non-negative")
        if self.max_latency_ms < self.min_latency_ms:
            raise ConfigurationError("max_latency_ms must not be below min_latency_ms")
        if not 0.0 <= self.failure_rate <= 1.0:
            raise ConfigurationError("failure_rate must be between 0 and 1")
        if self.ratelimit is not None and self.ratelimit.max_calls <= 0:
            raise ConfigurationError("ratelimit.max_calls must be positive")


def get_backend_config() -> SimulatedBackendConfig:
    min_latency = env_float("REVIEWFLOW_MIN_LATENCY_MS", DEFAULT_MIN_LATENCY_MS)
    max_latency = env_float("REVIEWFLOW_MAX_LATENCY_MS", DEFAULT_MAX_LATENCY_MS)
    failure_rate = env_float("REVIEWFLOW_FAILURE_RATE", DEFAULT_FAILURE_RATE)
    calls_per_second = env_int("REVIEWFLOW_RATE_LIMIT")
    ratelimit = (
        RateLimit(max_calls=calls_per_second, per_seconds=1.0)
        if calls_per_second is not None
        else None
    )
    return SimulatedBackendConfig(
        min_latency_ms=DEFAULT_MIN_LATENCY_MS if min_latency is None else min_latency,
        max_latency_ms=DEFAULT_MAX_LATENCY_MS if max_latency is None else max_latency,
        failure_rate=DEFAULT_FAILURE_RATE if failure_rate is None else failure_rate,
        ratelimit=ratelimit,
    )
