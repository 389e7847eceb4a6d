"""Failure taxonomy for record mutations."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reviewflow.domain.model import Action, WorkflowState


class MutationError(RuntimeError):
    """Base class for failed mutation attempts on a single record."""

    retryable: bool = False

    def __init__(self, message: str, *, record_id: str, action: Action) -> None:
        super().__init__(message)
        self.record_id = record_id
        self.action = action


class RecordNotFoundError(MutationError):
    """The record is absent from the store; detected before any optimistic write."""

    def __init__(self, *, record_id: str, action: Action) -> None:
        super().__init__(f"Record not found: {record_id}", record_id=record_id, action=action)


class InvalidTransitionError(MutationError):
    """The action is not legal for the record's current status."""

    def __init__(
        self,
        *,
        record_id: str,
        action: Action,
        current_status: WorkflowState,
        required: str,
    ) -> None:
        super().__init__(
            f'Invalid transition: cannot {action} a record with status "{current_status}" '
            f'(requires "{required}")',
            record_id=record_id,
            action=action,
        )
        self.current_status = current_status
        self.required = required


class BackingCallFailedError(MutationError):
    """The backing write failed after the optimistic update was applied."""

    # retrying is a caller decision; the coordinator never retries
    retryable = True

    def __init__(self, *, record_id: str, action: Action, cause: str) -> None:
        super().__init__(
            f"Failed to {action} {record_id}: {cause}",
            record_id=record_id,
            action=action,
        )
        self.cause = cause
