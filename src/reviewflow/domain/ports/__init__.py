"""Domain port definitions for adapters."""

from __future__ import annotations

from .notifying import MutationNotifier, Notice, NoticeLevel
from .store import RecordStore
from .updating import BatchFailure, BatchRecordUpdater, BatchUpdateResult, RecordUpdater

__all__ = [
    "BatchFailure",
    "BatchRecordUpdater",
    "BatchUpdateResult",
    "MutationNotifier",
    "Notice",
    "NoticeLevel",
    "RecordStore",
    "RecordUpdater",
]
