"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from reviewflow.adapters.memory import InMemoryRecordStore
from reviewflow.adapters.seed import (
    DEFAULT_RECORD_COUNT,
    DEFAULT_SEED,
    generate_records,
    read_records,
    write_records,
)
from reviewflow.adapters.simulated import SimulatedBackend
from reviewflow.config import get_backend_config, get_coordinator_config, get_storage_config
from reviewflow.domain.model import Action
from reviewflow.domain.mutations import (
    BatchCoordinator,
    InvalidTransitionError,
    LoggingNotifier,
    MutationCoordinator,
    MutationError,
    RecordNotFoundError,
)
from reviewflow.domain.pending import PendingOperationTracker
from reviewflow.domain.workflow import available_actions

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable
    from pathlib import Path

    from reviewflow.config import CoordinatorConfig, SimulatedBackendConfig
    from reviewflow.domain.model import ContentRecord
    from reviewflow.domain.mutations import BatchResult
    from reviewflow.domain.ports import MutationNotifier
    from reviewflow.domain.queries import RecordStats

log = getLogger(__name__)

SESSION_BLOCK_REASON = "Blocked during review session"


@dataclass(slots=True)
class ReviewSession:
    """Client store, simulated service and coordinators wired together."""

    store: InMemoryRecordStore
    backend: SimulatedBackend
    coordinator: MutationCoordinator
    batch: BatchCoordinator

    @property
    def tracker(self) -> PendingOperationTracker:
        return self.coordinator.tracker


def build_session(
    records: Iterable[ContentRecord],
    *,
    backend_config: SimulatedBackendConfig | None = None,
    coordinator_config: CoordinatorConfig | None = None,
    notifier: MutationNotifier | None = None,
    rng: random.Random | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> ReviewSession:
    snapshot = list(records)
    store = InMemoryRecordStore(snapshot)
    backend = SimulatedBackend(
        snapshot,
        config=backend_config or get_backend_config(),
        rng=rng,
        sleep=sleep,
    )
    coordinator = MutationCoordinator(
        store=store,
        updater=backend,
        tracker=PendingOperationTracker(),
        notifier=notifier or LoggingNotifier(),
        config=coordinator_config or get_coordinator_config(),
    )
    return ReviewSession(
        store=store,
        backend=backend,
        coordinator=coordinator,
        batch=BatchCoordinator(coordinator=coordinator),
    )


def load_records(
    path: Path | None = None,
    *,
    count: int = DEFAULT_RECORD_COUNT,
    seed: int = DEFAULT_SEED,
) -> list[ContentRecord]:
    """Read records from ``path`` or generate them when no path is given."""

    if path is not None:
        return read_records(path)
    return generate_records(count, seed)


def export_seed_file(
    path: Path | None = None,
    *,
    count: int = DEFAULT_RECORD_COUNT,
    seed: int = DEFAULT_SEED,
) -> Path:
    target = path or get_storage_config().seed_path()
    write_records(target, generate_records(count, seed))
    return target


@dataclass(slots=True)
class SimulationResult:
    """Tally of one simulated review session."""

    issued: int = 0
    succeeded: int = 0
    failed: int = 0
    rejected: int = 0
    batches: int = 0
    store_stats: RecordStats | None = None
    server_stats: RecordStats | None = None
    diverged: list[str] = field(default_factory=list[str])


async def run_workload(
    session: ReviewSession,
    *,
    actions: int,
    batch_size: int = 0,
    batch_every: int = 10,
    rng: random.Random | None = None,
) -> SimulationResult:
    """Fire ``actions`` operator actions without waiting for each to settle.

    Every ``batch_every``-th action is a batch over ``batch_size`` records when
    ``batch_size`` is positive. Actions are picked from the ones legal for the
    record as currently displayed, so overlapping actions on the same record
    happen naturally once earlier ones are still pending.
    """

    chooser = rng or random.Random()
    result = SimulationResult()
    ids = list(session.store.ids())
    if not ids:
        return result

    singles: list[asyncio.Task[ContentRecord]] = []
    batches: list[asyncio.Task[BatchResult]] = []
    for index in range(actions):
        if batch_size > 0 and batch_every > 0 and index % batch_every == batch_every - 1:
            selection = chooser.sample(ids, min(batch_size, len(ids)))
            action = chooser.choice(tuple(Action))
            batches.append(
                asyncio.create_task(
                    session.batch.mutate_many(selection, action, _reason_for(action))
                )
            )
            result.issued += len(selection)
            result.batches += 1
        else:
            record_id = chooser.choice(ids)
            action = _pick_action(session, record_id, chooser)
            singles.append(
                asyncio.create_task(
                    session.coordinator.mutate(record_id, action, _reason_for(action))
                )
            )
            result.issued += 1
        # let the task run its optimistic half before the next action is chosen
        await asyncio.sleep(0)

    for outcome in await asyncio.gather(*singles, return_exceptions=True):
        _tally(result, outcome)
    for batch_result in await asyncio.gather(*batches):
        result.succeeded += len(batch_result.successful)
        for failure in batch_result.failed:
            _tally(result, failure.error)

    result.store_stats = session.store.stats()
    result.server_stats = session.backend.get_stats()
    result.diverged = [
        record.id
        for record in session.store
        if (server := session.backend.get_record(record.id)) is not None
        and server.status is not record.status
    ]
    return result


def run_simulation(
    *,
    records: Iterable[ContentRecord],
    actions: int,
    batch_size: int = 0,
    seed: int | None = None,
    backend_config: SimulatedBackendConfig | None = None,
    coordinator_config: CoordinatorConfig | None = None,
    notifier: MutationNotifier | None = None,
) -> SimulationResult:
    """Run a simulated review session to completion."""

    session = build_session(
        records,
        backend_config=backend_config,
        coordinator_config=coordinator_config,
        notifier=notifier,
        rng=random.Random(seed),
    )
    log.info(
        "Starting simulation: records=%s, actions=%s, batch_size=%s, failure_rate=%s",
        len(session.store),
        actions,
        batch_size,
        session.backend.config.failure_rate,
    )
    result = asyncio.run(
        run_workload(
            session,
            actions=actions,
            batch_size=batch_size,
            rng=random.Random(seed),
        )
    )
    log.info(
        "Finished simulation: issued=%s, succeeded=%s, failed=%s, rejected=%s, diverged=%s",
        result.issued,
        result.succeeded,
        result.failed,
        result.rejected,
        len(result.diverged),
    )
    return result


def _pick_action(session: ReviewSession, record_id: str, rng: random.Random) -> Action:
    record = session.store.get(record_id)
    legal = available_actions(record.status) if record is not None else ()
    if legal:
        return rng.choice(legal)
    return rng.choice(tuple(Action))


def _reason_for(action: Action) -> str | None:
    return SESSION_BLOCK_REASON if action is Action.BLOCK else None


def _tally(result: SimulationResult, outcome: object) -> None:
    if isinstance(outcome, (InvalidTransitionError, RecordNotFoundError)):
        result.rejected += 1
    elif isinstance(outcome, MutationError):
        result.failed += 1
    elif isinstance(outcome, BaseException):
        raise outcome
    else:
        result.succeeded += 1
