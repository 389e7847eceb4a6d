from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import pytest

from reviewflow.adapters.memory import InMemoryRecordStore
from reviewflow.config import CoordinatorConfig
from reviewflow.domain.model import Action, WorkflowState
from reviewflow.domain.mutations import (
    BackingCallFailedError,
    CollectingNotifier,
    InvalidTransitionError,
    MutationCoordinator,
    RecordNotFoundError,
)
from reviewflow.domain.pending import PendingOperationTracker
from reviewflow.domain.ports import NoticeLevel
from tests.helpers.records import (
    ControlledUpdater,
    FakeClock,
    ImmediateUpdater,
    make_record,
    settle,
)

if TYPE_CHECKING:
    from reviewflow.domain.model import ContentRecord
    from reviewflow.domain.ports import RecordUpdater


def _coordinator(
    *records: ContentRecord,
    updater: RecordUpdater | None = None,
    config: CoordinatorConfig | None = None,
) -> tuple[MutationCoordinator, InMemoryRecordStore, CollectingNotifier]:
    store = InMemoryRecordStore(records or [make_record()])
    notifier = CollectingNotifier()
    coordinator = MutationCoordinator(
        store=store,
        updater=updater or ControlledUpdater(),
        tracker=PendingOperationTracker(),
        notifier=notifier,
        config=config or CoordinatorConfig(),
        clock=FakeClock(),
    )
    return coordinator, store, notifier


def test_optimistic_state_is_visible_before_backing_call_settles() -> None:
    async def scenario() -> None:
        updater = ControlledUpdater()
        coordinator, store, notifier = _coordinator(updater=updater)

        task = asyncio.create_task(coordinator.mutate("rec-1", Action.REVIEW))
        await settle()

        record = store.get("rec-1")
        assert record is not None
        assert record.status is WorkflowState.IN_REVIEW
        assert record.updated_at > make_record().updated_at
        assert coordinator.has_pending("rec-1")
        assert coordinator.latest_action("rec-1") is Action.REVIEW
        assert notifier.notices == []

        updater.succeed(0)
        committed = await task

        assert committed.status is WorkflowState.IN_REVIEW
        assert not coordinator.has_pending("rec-1")
        assert coordinator.get("rec-1") == record
        assert [notice.level for notice in notifier.notices] == [NoticeLevel.SUCCESS]
        assert notifier.notices[0].title == "Started review"

    asyncio.run(scenario())


def test_missing_record_fails_without_pending_operation() -> None:
    async def scenario() -> None:
        updater = ControlledUpdater()
        coordinator, _, notifier = _coordinator(updater=updater)

        with pytest.raises(RecordNotFoundError) as exc:
            await coordinator.mutate("missing", Action.REVIEW)

        assert exc.value.retryable is False
        assert not coordinator.has_pending("missing")
        assert updater.calls == []
        assert notifier.notices[0].level is NoticeLevel.ERROR

    asyncio.run(scenario())


def test_invalid_transition_fails_fast_and_names_required_state() -> None:
    async def scenario() -> None:
        updater = ControlledUpdater()
        original = make_record(status=WorkflowState.QUEUED)
        coordinator, store, _ = _coordinator(original, updater=updater)

        with pytest.raises(InvalidTransitionError) as exc:
            await coordinator.mutate("rec-1", Action.PUBLISH)

        assert exc.value.current_status is WorkflowState.QUEUED
        assert exc.value.required == "Approved"
        assert "Approved" in str(exc.value)
        assert store.get("rec-1") == original
        assert not coordinator.has_pending("rec-1")
        assert updater.calls == []

    asyncio.run(scenario())


def test_blocked_record_rejects_every_action() -> None:
    async def scenario() -> None:
        coordinator, _, _ = _coordinator(make_record(status=WorkflowState.BLOCKED))

        for action in Action:
            with pytest.raises(InvalidTransitionError):
                await coordinator.execute("rec-1", action)

    asyncio.run(scenario())


def test_block_sets_reason_exactly() -> None:
    async def scenario() -> None:
        updater = ImmediateUpdater()
        coordinator, store, _ = _coordinator(
            make_record(status=WorkflowState.PUBLISHED, block_reason="old"),
            updater=updater,
        )

        await coordinator.mutate("rec-1", Action.BLOCK, "Hallucinated pricing")

        record = store.get("rec-1")
        assert record is not None
        assert record.status is WorkflowState.BLOCKED
        assert record.block_reason == "Hallucinated pricing"
        assert updater.calls == [("rec-1", Action.BLOCK, "Hallucinated pricing")]

    asyncio.run(scenario())


def test_non_block_actions_leave_reason_untouched() -> None:
    async def scenario() -> None:
        coordinator, store, _ = _coordinator(
            make_record(status=WorkflowState.QUEUED, block_reason="kept"),
            updater=ImmediateUpdater(),
        )

        await coordinator.mutate("rec-1", Action.REVIEW, "ignored")

        record = store.get("rec-1")
        assert record is not None
        assert record.status is WorkflowState.IN_REVIEW
        assert record.block_reason == "kept"

    asyncio.run(scenario())


def test_failed_backing_call_rolls_back_to_anchor() -> None:
    async def scenario() -> None:
        updater = ControlledUpdater()
        coordinator, store, notifier = _coordinator(
            make_record(status=WorkflowState.APPROVED, block_reason="earlier"),
            updater=updater,
        )

        task = asyncio.create_task(coordinator.mutate("rec-1", Action.BLOCK, "policy"))
        await settle()
        optimistic = store.get("rec-1")
        assert optimistic is not None
        assert optimistic.status is WorkflowState.BLOCKED
        assert optimistic.block_reason == "policy"

        updater.fail(0)
        with pytest.raises(BackingCallFailedError) as exc:
            await task

        record = store.get("rec-1")
        assert record is not None
        assert record.status is WorkflowState.APPROVED
        assert record.block_reason == "earlier"
        assert not coordinator.has_pending("rec-1")
        assert exc.value.retryable is True
        assert exc.value.cause == "connection reset"
        assert isinstance(exc.value.__cause__, ConnectionError)
        assert notifier.notices[-1].level is NoticeLevel.ERROR
        assert notifier.notices[-1].title == "Failed to block"

    asyncio.run(scenario())


def test_failure_without_message_uses_exception_name() -> None:
    async def scenario() -> None:
        updater = ControlledUpdater()
        coordinator, _, _ = _coordinator(updater=updater)

        task = asyncio.create_task(coordinator.execute("rec-1", Action.REVIEW))
        await settle()
        updater.fail(0, RuntimeError())

        with pytest.raises(BackingCallFailedError) as exc:
            await task

        assert exc.value.cause == "RuntimeError"

    asyncio.run(scenario())


def test_execute_does_not_notify() -> None:
    async def scenario() -> None:
        coordinator, _, notifier = _coordinator(updater=ImmediateUpdater())

        await coordinator.execute("rec-1", Action.REVIEW)

        assert notifier.notices == []

    asyncio.run(scenario())


def test_timeout_forces_failure_and_rollback() -> None:
    async def scenario() -> None:
        updater = ControlledUpdater()
        coordinator, store, _ = _coordinator(
            updater=updater,
            config=CoordinatorConfig(timeout_seconds=0.01),
        )

        with pytest.raises(BackingCallFailedError) as exc:
            await coordinator.mutate("rec-1", Action.REVIEW)

        record = store.get("rec-1")
        assert record is not None
        assert record.status is WorkflowState.QUEUED
        assert not coordinator.has_pending("rec-1")
        assert exc.value.cause == "timed out after 0.01s"
        assert updater.calls[0].future.cancelled()

    asyncio.run(scenario())


def test_cancelled_mutation_rolls_back_and_propagates() -> None:
    async def scenario() -> None:
        updater = ControlledUpdater()
        coordinator, store, notifier = _coordinator(updater=updater)

        task = asyncio.create_task(coordinator.mutate("rec-1", Action.REVIEW))
        await settle()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        record = store.get("rec-1")
        assert record is not None
        assert record.status is WorkflowState.QUEUED
        assert not coordinator.has_pending("rec-1")
        assert notifier.notices == []

    asyncio.run(scenario())


def test_mutations_on_different_records_are_independent() -> None:
    async def scenario() -> None:
        updater = ControlledUpdater()
        coordinator, store, _ = _coordinator(
            make_record("rec-1"),
            make_record("rec-2"),
            updater=updater,
        )

        first = asyncio.create_task(coordinator.execute("rec-1", Action.REVIEW))
        second = asyncio.create_task(coordinator.execute("rec-2", Action.BLOCK, "spam"))
        await settle()

        updater.fail(0)
        updater.succeed(1)
        results = await asyncio.gather(first, second, return_exceptions=True)

        assert isinstance(results[0], BackingCallFailedError)
        rec_1 = store.get("rec-1")
        rec_2 = store.get("rec-2")
        assert rec_1 is not None
        assert rec_2 is not None
        assert rec_1.status is WorkflowState.QUEUED
        assert rec_2.status is WorkflowState.BLOCKED
        assert rec_2.block_reason == "spam"

    asyncio.run(scenario())


def test_record_removed_before_success_is_not_found() -> None:
    async def scenario() -> None:
        updater = ControlledUpdater()
        coordinator, store, notifier = _coordinator(updater=updater)

        task = asyncio.create_task(coordinator.mutate("rec-1", Action.REVIEW))
        await settle()
        store.remove("rec-1")
        updater.succeed(0)

        with pytest.raises(RecordNotFoundError):
            await task

        assert "rec-1" not in store
        assert not coordinator.has_pending("rec-1")
        assert [notice.title for notice in notifier.notices] == ["Failed to review"]

    asyncio.run(scenario())


def test_record_removed_before_failure_is_not_found() -> None:
    async def scenario() -> None:
        updater = ControlledUpdater()
        coordinator, store, _ = _coordinator(updater=updater)

        task = asyncio.create_task(coordinator.execute("rec-1", Action.REVIEW))
        await settle()
        store.remove("rec-1")
        updater.fail(0)

        with pytest.raises(RecordNotFoundError) as exc:
            await task

        assert isinstance(exc.value.__cause__, ConnectionError)
        assert "rec-1" not in store
        assert not coordinator.has_pending("rec-1")

    asyncio.run(scenario())


def test_cleared_operation_still_rolls_back_on_failure() -> None:
    async def scenario() -> None:
        updater = ControlledUpdater()
        coordinator, store, _ = _coordinator(updater=updater)

        task = asyncio.create_task(coordinator.execute("rec-1", Action.REVIEW))
        await settle()
        coordinator.tracker.clear("rec-1")
        updater.fail(0)

        with pytest.raises(BackingCallFailedError):
            await task

        record = store.get("rec-1")
        assert record is not None
        assert record.status is WorkflowState.QUEUED
        assert not coordinator.has_pending("rec-1")

    asyncio.run(scenario())


def test_cleared_operation_commits_without_error() -> None:
    async def scenario() -> None:
        updater = ControlledUpdater()
        coordinator, store, _ = _coordinator(updater=updater)

        task = asyncio.create_task(coordinator.execute("rec-1", Action.REVIEW))
        await settle()
        coordinator.tracker.clear("rec-1")
        updater.succeed(0)
        await task

        record = store.get("rec-1")
        assert record is not None
        assert record.status is WorkflowState.IN_REVIEW

    asyncio.run(scenario())
