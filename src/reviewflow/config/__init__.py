"""Application configuration helpers."""

from __future__ import annotations

from .backend import RateLimit, SimulatedBackendConfig, get_backend_config
from .coordinator import CoordinatorConfig, get_coordinator_config
from .env import env_float, env_int
from .errors import ConfigurationError
from .logging import configure_logging
from .storage import StorageConfig, get_storage_config

__all__ = [
    "ConfigurationError",
    "CoordinatorConfig",
    "RateLimit",
    "SimulatedBackendConfig",
    "StorageConfig",
    "configure_logging",
    "env_float",
    "env_int",
    "get_backend_config",
    "get_coordinator_config",
    "get_storage_config",
]
