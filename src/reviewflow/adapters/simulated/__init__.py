"""Simulated latent, failure-prone update service."""

from __future__ import annotations

from .backend import ApiErrorCode, SimulatedApiError, SimulatedBackend

__all__ = ["ApiErrorCode", "SimulatedApiError", "SimulatedBackend"]
