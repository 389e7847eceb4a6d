"""Per-record log of in-flight mutations."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from itertools import count
from logging import getLogger
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from reviewflow.domain.model import utcnow

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from datetime import datetime

    from reviewflow.domain.model import Action, WorkflowState

log = getLogger(__name__)


@dataclass(slots=True, frozen=True, kw_only=True)
class PendingOperation:
    """One outstanding attempt to change one record.

    ``previous_status`` and ``previous_reason`` form the rollback anchor: the
    record as it was when the attempt was validated.
    """

    id: UUID
    record_id: str
    action: Action
    previous_status: WorkflowState
    previous_reason: str | None
    sequence: int
    created_at: datetime


@dataclass(slots=True)
class PendingOperationTracker:
    """Tracks pending operations keyed by record id.

    Operations are kept in creation order per record. The tracker never refuses
    a new operation because others are outstanding for the same record; legality
    of the state change is checked by the workflow before :meth:`begin`.
    """

    clock: Callable[[], datetime] = utcnow
    _operations: dict[str, list[PendingOperation]] = field(
        default_factory=dict[str, list[PendingOperation]], init=False
    )
    _last_committed: dict[str, int] = field(default_factory=dict[str, int], init=False)
    _sequence: Iterator[int] = field(default_factory=lambda: count(1), init=False)

    def begin(
        self,
        record_id: str,
        action: Action,
        current_status: WorkflowState,
        current_reason: str | None = None,
    ) -> UUID:
        """Register a new pending operation and return its id."""

        operation = PendingOperation(
            id=uuid4(),
            record_id=record_id,
            action=action,
            previous_status=current_status,
            previous_reason=current_reason,
            sequence=next(self._sequence),
            created_at=self.clock(),
        )
        self._operations.setdefault(record_id, []).append(operation)
        log.debug(
            "Pending %s on %s (op=%s, seq=%s, anchor=%s)",
            action,
            record_id,
            operation.id,
            operation.sequence,
            current_status,
        )
        return operation.id

    def end(self, operation_id: UUID, record_id: str, *, committed: bool = False) -> None:
        """Retire ``operation_id``; unknown ids are ignored.

        ``committed`` marks the operation's effect as confirmed so that earlier
        operations failing afterwards do not roll it back.
        """

        existing = self._operations.get(record_id)
        if not existing:
            return
        remaining = [operation for operation in existing if operation.id != operation_id]
        if len(remaining) == len(existing):
            return
        if committed:
            retired = next(operation for operation in existing if operation.id == operation_id)
            previous = self._last_committed.get(record_id, 0)
            self._last_committed[record_id] = max(previous, retired.sequence)
        if remaining:
            self._operations[record_id] = remaining
        else:
            # commit marks only matter to operations still pending
            del self._operations[record_id]
            self._last_committed.pop(record_id, None)

    def rebase(
        self,
        record_id: str,
        after_sequence: int,
        previous_status: WorkflowState,
        previous_reason: str | None,
    ) -> int:
        """Move the anchor of operations created after ``after_sequence``.

        Used when an earlier operation is rolled back: later operations were
        validated against its optimistic result, which never took effect.
        Returns how many operations were rebased.
        """

        operations = self._operations.get(record_id)
        if not operations:
            return 0
        rebased = 0
        for index, operation in enumerate(operations):
            if operation.sequence > after_sequence:
                operations[index] = replace(
                    operation,
                    previous_status=previous_status,
                    previous_reason=previous_reason,
                )
                rebased += 1
        return rebased

    def clear(self, record_id: str) -> None:
        self._operations.pop(record_id, None)
        self._last_committed.pop(record_id, None)

    def get(self, operation_id: UUID, record_id: str) -> PendingOperation | None:
        for operation in self._operations.get(record_id, ()):
            if operation.id == operation_id:
                return operation
        return None

    def operations(self, record_id: str) -> tuple[PendingOperation, ...]:
        return tuple(self._operations.get(record_id, ()))

    def has_pending(self, record_id: str) -> bool:
        return bool(self._operations.get(record_id))

    def pending_count(self, record_id: str) -> int:
        return len(self._operations.get(record_id, ()))

    def latest_action(self, record_id: str) -> Action | None:
        """Action of the most recently created operation still pending."""

        operations = self._operations.get(record_id)
        if not operations:
            return None
        return max(operations, key=lambda operation: operation.sequence).action

    def committed_after(self, record_id: str, sequence: int) -> bool:
        """Whether an operation created after ``sequence`` has committed."""

        return self._last_committed.get(record_id, 0) > sequence

    def pending_record_ids(self) -> frozenset[str]:
        return frozenset(self._operations)
