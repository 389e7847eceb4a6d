"""In-memory record store."""

from __future__ import annotations

from .store import InMemoryRecordStore

__all__ = ["InMemoryRecordStore"]
