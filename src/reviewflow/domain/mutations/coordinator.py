"""Optimistic single-record mutations.

A mutation runs in two halves. The synchronous half looks the record up,
validates the action against the record's *current* status, registers a
pending operation and writes the predicted record into the store. Nothing in
that half awaits, so under asyncio no other mutation can observe or write the
record between the read and the optimistic write.

The asynchronous half awaits the backing write. On success the optimistic
record stays as it is; on failure the operation's anchor is restored unless a
later operation on the same record has already committed. Later operations
still pending on the record inherit the restored anchor. A record removed from
the store before its call settles is reported as not found.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from reviewflow.config.coordinator import CoordinatorConfig
from reviewflow.domain.model import Action, utcnow
from reviewflow.domain.mutations.errors import (
    BackingCallFailedError,
    InvalidTransitionError,
    MutationError,
    RecordNotFoundError,
)
from reviewflow.domain.mutations.notices import LoggingNotifier, failure_notice, success_notice
from reviewflow.domain.pending import PendingOperationTracker
from reviewflow.domain.workflow import next_state, required_state_label

if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime

    from reviewflow.domain.model import ContentRecord
    from reviewflow.domain.pending import PendingOperation
    from reviewflow.domain.ports import MutationNotifier, RecordStore, RecordUpdater

log = getLogger(__name__)


@dataclass(slots=True)
class MutationCoordinator:
    """Apply workflow actions optimistically and reconcile them on settlement."""

    store: RecordStore
    updater: RecordUpdater
    tracker: PendingOperationTracker = field(default_factory=PendingOperationTracker)
    notifier: MutationNotifier = field(default_factory=LoggingNotifier)
    config: CoordinatorConfig = field(default_factory=CoordinatorConfig)
    clock: Callable[[], datetime] = utcnow

    async def mutate(
        self,
        record_id: str,
        action: Action,
        reason: str | None = None,
    ) -> ContentRecord:
        """Run one mutation and notify the operator of its outcome."""

        try:
            committed = await self.execute(record_id, action, reason)
        except MutationError as error:
            self.notifier(failure_notice(error))
            raise
        self.notifier(success_notice(action))
        return committed

    async def execute(
        self,
        record_id: str,
        action: Action,
        reason: str | None = None,
    ) -> ContentRecord:
        """Run one mutation without notifying; raises :class:`MutationError`."""

        operation = self.apply_optimistic(record_id, action, reason)
        try:
            committed = await self._perform(record_id, action, reason)
        except asyncio.CancelledError:
            self._roll_back(operation)
            raise
        except Exception as exc:
            self._roll_back(operation)
            if record_id not in self.store:
                raise RecordNotFoundError(record_id=record_id, action=action) from exc
            cause = _describe_failure(exc, self.config.timeout_seconds)
            log.warning("Backing call for %s on %s failed: %s", action, record_id, cause)
            raise BackingCallFailedError(
                record_id=record_id,
                action=action,
                cause=cause,
            ) from exc

        if record_id not in self.store:
            self.tracker.end(operation.id, record_id)
            log.warning("Record %s disappeared before %s settled", record_id, action)
            raise RecordNotFoundError(record_id=record_id, action=action)

        self.tracker.end(operation.id, record_id, committed=True)
        log.debug("Committed %s on %s (op=%s)", action, record_id, operation.id)
        return committed

    def apply_optimistic(
        self,
        record_id: str,
        action: Action,
        reason: str | None = None,
    ) -> PendingOperation:
        """Validate, register and optimistically write; returns the new operation.

        Must stay free of awaits: it is the read-validate-write unit.
        """

        current = self.store.get(record_id)
        if current is None:
            raise RecordNotFoundError(record_id=record_id, action=action)

        target = next_state(current.status, action)
        if target is None:
            raise InvalidTransitionError(
                record_id=record_id,
                action=action,
                current_status=current.status,
                required=required_state_label(action),
            )

        self.tracker.begin(
            record_id,
            action,
            current.status,
            current.block_reason,
        )
        self.store.put(
            current.with_status(
                target,
                block_reason=reason,
                replace_reason=action is Action.BLOCK,
                updated_at=self.clock(),
            )
        )
        log.debug("Optimistic %s on %s: %s -> %s", action, record_id, current.status, target)
        return self.tracker.operations(record_id)[-1]

    async def _perform(
        self,
        record_id: str,
        action: Action,
        reason: str | None,
    ) -> ContentRecord:
        async with asyncio.timeout(self.config.timeout_seconds):
            return await self.updater(record_id, action, reason)

    def _roll_back(self, registered: PendingOperation) -> None:
        record_id = registered.record_id
        # the tracker copy carries a rebased anchor, the snapshot survives clear()
        operation = self.tracker.get(registered.id, record_id)
        if operation is None:
            log.warning(
                "Operation %s on %s was cleared before settlement", registered.id, record_id
            )
            operation = registered

        if self.tracker.committed_after(record_id, operation.sequence):
            log.info(
                "Skipping rollback of %s on %s: a later operation already committed",
                operation.action,
                record_id,
            )
        else:
            current = self.store.get(record_id)
            if current is None:
                log.warning("Record %s disappeared before rollback", record_id)
            else:
                self.store.put(
                    current.with_status(
                        operation.previous_status,
                        block_reason=operation.previous_reason,
                        replace_reason=True,
                        updated_at=self.clock(),
                    )
                )
                log.info(
                    "Rolled back %s on %s to %s",
                    operation.action,
                    record_id,
                    operation.previous_status,
                )
            self.tracker.rebase(
                record_id,
                operation.sequence,
                operation.previous_status,
                operation.previous_reason,
            )

        self.tracker.end(operation.id, record_id)

    def get(self, record_id: str) -> ContentRecord | None:
        return self.store.get(record_id)

    def has_pending(self, record_id: str) -> bool:
        return self.tracker.has_pending(record_id)

    def latest_action(self, record_id: str) -> Action | None:
        return self.tracker.latest_action(record_id)


def _describe_failure(exc: Exception, timeout_seconds: float | None) -> str:
    if isinstance(exc, TimeoutError) and timeout_seconds is not None:
        return f"timed out after {timeout_seconds:g}s"
    return str(exc) or type(exc).__name__
