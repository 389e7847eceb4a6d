"""In-process stand-in for the remote record service.

The backend keeps its own server-side copy of every record and validates each
write against that copy, so it can disagree with the client store when
optimistic writes race or roll back. Each call waits a random latency and fails
with a configurable probability before touching any state.
"""

from __future__ import annotations

import asyncio
import random
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from aiolimiter import AsyncLimiter

from reviewflow.config.backend import SimulatedBackendConfig
from reviewflow.domain.model import Action, utcnow
from reviewflow.domain.ports.updating import BatchFailure, BatchUpdateResult
from reviewflow.domain.queries import apply_filters, record_stats
from reviewflow.domain.workflow import next_state

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Sequence
    from datetime import datetime

    from reviewflow.domain.model import ContentRecord
    from reviewflow.domain.queries import RecordFilters, RecordStats

log = getLogger(__name__)


class ApiErrorCode(StrEnum):
    NETWORK_ERROR = "NETWORK_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"


class SimulatedApiError(RuntimeError):
    """Raised by the simulated service; ``code`` classifies the failure."""

    def __init__(self, message: str, *, code: ApiErrorCode) -> None:
        super().__init__(message)
        self.code = code


class SimulatedBackend:
    def __init__(
        self,
        records: Iterable[ContentRecord] = (),
        *,
        config: SimulatedBackendConfig | None = None,
        rng: random.Random | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.config = config or SimulatedBackendConfig()
        self._records: dict[str, ContentRecord] = {record.id: record for record in records}
        self._rng = rng or random.Random()
        self._sleep = sleep
        self._clock = clock
        ratelimit = self.config.ratelimit
        self._limiter: AsyncLimiter | None = (
            AsyncLimiter(ratelimit.max_calls, ratelimit.per_seconds) if ratelimit else None
        )
        self.calls = 0

    async def __call__(
        self,
        record_id: str,
        action: Action,
        reason: str | None = None,
    ) -> ContentRecord:
        return await self.perform_update(record_id, action, reason)

    async def perform_update(
        self,
        record_id: str,
        action: Action,
        reason: str | None = None,
    ) -> ContentRecord:
        """Apply ``action`` to the server-side record after simulated latency."""

        self.calls += 1
        await self._wait()

        if self._rng.random() < self.config.failure_rate:
            raise SimulatedApiError(
                "Network error: Request failed. Please try again.",
                code=ApiErrorCode.NETWORK_ERROR,
            )

        record = self._records.get(record_id)
        if record is None:
            raise SimulatedApiError("Record not found", code=ApiErrorCode.NOT_FOUND)

        target = next_state(record.status, action)
        if target is None:
            raise SimulatedApiError(
                f'Invalid transition: Cannot {action} a record with status "{record.status}"',
                code=ApiErrorCode.INVALID_TRANSITION,
            )

        updated = record.with_status(
            target,
            block_reason=reason,
            replace_reason=action is Action.BLOCK,
            updated_at=self._clock(),
        )
        self._records[record_id] = updated
        log.debug("Server applied %s on %s: %s -> %s", action, record_id, record.status, target)
        return updated

    async def perform_batch_update(
        self,
        record_ids: Sequence[str],
        action: Action,
        reason: str | None = None,
    ) -> BatchUpdateResult:
        """Update each record independently; failures are reported, not raised."""

        outcomes = await asyncio.gather(
            *(self.perform_update(record_id, action, reason) for record_id in record_ids),
            return_exceptions=True,
        )
        result = BatchUpdateResult()
        for record_id, outcome in zip(record_ids, outcomes, strict=True):
            if isinstance(outcome, SimulatedApiError):
                result.failed.append(BatchFailure(record_id=record_id, error=str(outcome)))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                result.successful.append(outcome)
        return result

    def get_record(self, record_id: str) -> ContentRecord | None:
        return self._records.get(record_id)

    def get_records(self, filters: RecordFilters | None = None) -> list[ContentRecord]:
        return apply_filters(self._records.values(), filters)

    def get_stats(self) -> RecordStats:
        return record_stats(self._records.values())

    async def _wait(self) -> None:
        low = self.config.min_latency_ms
        high = self.config.max_latency_ms
        delay = self._rng.uniform(low, high) / 1000.0
        if self._limiter is None:
            await self._sleep(delay)
            return
        async with self._limiter:
            await self._sleep(delay)
