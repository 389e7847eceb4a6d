"""Multi-record mutations with independent per-record outcomes."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from reviewflow.domain.mutations.errors import InvalidTransitionError, MutationError
from reviewflow.domain.mutations.notices import PAST_TENSE
from reviewflow.domain.ports.notifying import Notice, NoticeLevel
from reviewflow.domain.workflow import required_state_label

if TYPE_CHECKING:
    from collections.abc import Iterable

    from reviewflow.domain.model import Action, ContentRecord
    from reviewflow.domain.mutations.coordinator import MutationCoordinator
    from reviewflow.domain.ports import MutationNotifier

log = getLogger(__name__)


class BatchOutcome(StrEnum):
    ALL_SUCCEEDED = "all_succeeded"
    ALL_FAILED = "all_failed"
    PARTIAL = "partial"
    EMPTY = "empty"


@dataclass(slots=True, frozen=True)
class FailedMutation:
    record_id: str
    error: MutationError


@dataclass(slots=True)
class BatchResult:
    """Records that committed and per-record errors, grouped but unordered."""

    successful: list[ContentRecord] = field(default_factory=list["ContentRecord"])
    failed: list[FailedMutation] = field(default_factory=list[FailedMutation])

    @property
    def outcome(self) -> BatchOutcome:
        return classify_batch(self)


def classify_batch(result: BatchResult) -> BatchOutcome:
    if not result.successful and not result.failed:
        return BatchOutcome.EMPTY
    if not result.failed:
        return BatchOutcome.ALL_SUCCEEDED
    if not result.successful:
        return BatchOutcome.ALL_FAILED
    return BatchOutcome.PARTIAL


def summarize_batch(result: BatchResult, action: Action) -> Notice | None:
    """Condense a batch result into one notice; ``None`` for an empty batch.

    An all-failed batch made only of invalid transitions usually means every
    selected record was in the wrong status, so the notice names the status the
    action requires.
    """

    succeeded = len(result.successful)
    failed = len(result.failed)
    match classify_batch(result):
        case BatchOutcome.EMPTY:
            return None
        case BatchOutcome.ALL_SUCCEEDED:
            return Notice(
                level=NoticeLevel.SUCCESS,
                title=f"{succeeded} items {PAST_TENSE[action]}",
                description="All actions completed successfully.",
            )
        case BatchOutcome.ALL_FAILED if all(
            isinstance(item.error, InvalidTransitionError) for item in result.failed
        ):
            return Notice(
                level=NoticeLevel.ERROR,
                title=f"Cannot {action}",
                description=(
                    f'{action} requires records in "{required_state_label(action)}" status.'
                ),
            )
        case BatchOutcome.ALL_FAILED:
            return Notice(
                level=NoticeLevel.ERROR,
                title=f"Batch {action} failed",
                description=f"All {failed} actions failed. Please try again.",
            )
        case _:
            return Notice(
                level=NoticeLevel.WARNING,
                title="Partially completed",
                description=f"{succeeded} succeeded, {failed} failed.",
            )


@dataclass(slots=True)
class BatchCoordinator:
    """Fan one action out over many records through the single-record coordinator."""

    coordinator: MutationCoordinator
    notifier: MutationNotifier | None = None

    async def mutate_many(
        self,
        record_ids: Iterable[str],
        action: Action,
        reason: str | None = None,
    ) -> BatchResult:
        """Mutate every record concurrently and collect each outcome.

        Per-record errors are captured in :attr:`BatchResult.failed`; one
        record's failure never affects another record's attempt.
        """

        unique_ids = list(dict.fromkeys(record_ids))
        outcomes = await asyncio.gather(
            *(self._attempt(record_id, action, reason) for record_id in unique_ids)
        )

        result = BatchResult()
        for record_id, outcome in zip(unique_ids, outcomes, strict=True):
            if isinstance(outcome, MutationError):
                result.failed.append(FailedMutation(record_id=record_id, error=outcome))
            else:
                result.successful.append(outcome)

        log.info(
            "Batch %s over %s records: %s succeeded, %s failed",
            action,
            len(unique_ids),
            len(result.successful),
            len(result.failed),
        )
        notifier = self.notifier if self.notifier is not None else self.coordinator.notifier
        notice = summarize_batch(result, action)
        if notice is not None:
            notifier(notice)
        return result

    async def _attempt(
        self,
        record_id: str,
        action: Action,
        reason: str | None,
    ) -> ContentRecord | MutationError:
        try:
            return await self.coordinator.execute(record_id, action, reason)
        except MutationError as error:
            return error
