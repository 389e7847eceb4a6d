"""Read-side helpers shared by record stores: filtering, ordering, counts."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

from reviewflow.domain.model import WorkflowState

if TYPE_CHECKING:
    from collections.abc import Iterable

    from reviewflow.domain.model import ContentRecord, Engine, Impact


@dataclass(slots=True, frozen=True, kw_only=True)
class RecordFilters:
    """Conjunctive filter; empty criteria match everything."""

    status: frozenset[WorkflowState] = frozenset()
    engine: frozenset[Engine] = frozenset()
    impact: frozenset[Impact] = frozenset()
    search: str | None = None

    def matches(self, record: ContentRecord) -> bool:
        if self.status and record.status not in self.status:
            return False
        if self.engine and record.engine not in self.engine:
            return False
        if self.impact and record.impact not in self.impact:
            return False
        if self.search:
            return self.search.casefold() in record.prompt.casefold()
        return True


@dataclass(slots=True, frozen=True)
class RecordStats:
    total: int
    by_status: dict[WorkflowState, int]


def apply_filters(
    records: Iterable[ContentRecord],
    filters: RecordFilters | None = None,
) -> list[ContentRecord]:
    """Filter ``records`` and order them most recently updated first."""

    selected = [record for record in records if filters is None or filters.matches(record)]
    return sorted(selected, key=lambda record: record.updated_at, reverse=True)


def record_stats(records: Iterable[ContentRecord]) -> RecordStats:
    counts = Counter(record.status for record in records)
    return RecordStats(
        total=sum(counts.values()),
        by_status={status: counts.get(status, 0) for status in WorkflowState},
    )
