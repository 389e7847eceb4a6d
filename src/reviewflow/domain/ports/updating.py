"""Ports for the asynchronous backing write."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from reviewflow.domain.model import Action, ContentRecord


@dataclass(slots=True, frozen=True)
class BatchFailure:
    record_id: str
    error: str


@dataclass(slots=True)
class BatchUpdateResult:
    """Per-record outcome of a bulk backing write."""

    successful: list[ContentRecord] = field(default_factory=list["ContentRecord"])
    failed: list[BatchFailure] = field(default_factory=list[BatchFailure])


@runtime_checkable
class RecordUpdater(Protocol):
    """Callable port performing the authoritative write for one record.

    Implementations may be slow and may raise any exception; the coordinator
    treats every exception as a failed backing call.
    """

    async def __call__(
        self,
        record_id: str,
        action: Action,
        reason: str | None = None,
    ) -> ContentRecord: ...


@runtime_checkable
class BatchRecordUpdater(Protocol):
    """Bulk variant reporting independent per-record success or failure."""

    async def perform_batch_update(
        self,
        record_ids: Sequence[str],
        action: Action,
        reason: str | None = None,
    ) -> BatchUpdateResult: ...
