"""Mutation coordinator settings."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float
from .errors import ConfigurationError


@dataclass(slots=True, frozen=True)
class CoordinatorConfig:
    # None leaves a hung backing call pending indefinitely
    timeout_seconds: float | None = None

    def __post_init__(self) -> None:
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ConfigurationError("timeout_seconds must be positive")


def get_coordinator_config() -> CoordinatorConfig:
    return CoordinatorConfig(timeout_seconds=env_float("REVIEWFLOW_TIMEOUT_SECONDS"))
