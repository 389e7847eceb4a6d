"""Optimistic mutation coordination."""

from __future__ import annotations

from .batch import (
    BatchCoordinator,
    BatchOutcome,
    BatchResult,
    FailedMutation,
    classify_batch,
    summarize_batch,
)
from .coordinator import MutationCoordinator
from .errors import (
    BackingCallFailedError,
    InvalidTransitionError,
    MutationError,
    RecordNotFoundError,
)
from .notices import CollectingNotifier, LoggingNotifier, failure_notice, success_notice

__all__ = [
    "BackingCallFailedError",
    "BatchCoordinator",
    "BatchOutcome",
    "BatchResult",
    "CollectingNotifier",
    "FailedMutation",
    "InvalidTransitionError",
    "LoggingNotifier",
    "MutationCoordinator",
    "MutationError",
    "RecordNotFoundError",
    "classify_batch",
    "failure_notice",
    "success_notice",
    "summarize_batch",
]
