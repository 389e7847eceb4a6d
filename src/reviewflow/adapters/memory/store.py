"""Dictionary-backed implementation of the record store port."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from reviewflow.domain.queries import apply_filters, record_stats

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from reviewflow.domain.model import ContentRecord
    from reviewflow.domain.queries import RecordFilters, RecordStats

log = getLogger(__name__)


class InMemoryRecordStore:
    """Holds one record per id; writes replace the stored record."""

    def __init__(self, records: Iterable[ContentRecord] | None = None) -> None:
        self._records: dict[str, ContentRecord] = {}
        for record in records or ():
            if record.id in self._records:
                raise ValueError(f"duplicate record id: {record.id}")
            self._records[record.id] = record

    def get(self, record_id: str) -> ContentRecord | None:
        return self._records.get(record_id)

    def put(self, record: ContentRecord) -> None:
        self._records[record.id] = record

    def remove(self, record_id: str) -> ContentRecord | None:
        removed = self._records.pop(record_id, None)
        if removed is not None:
            log.debug("Removed record %s", record_id)
        return removed

    def ids(self) -> tuple[str, ...]:
        return tuple(self._records)

    def all(self) -> tuple[ContentRecord, ...]:
        return tuple(self._records.values())

    def query(self, filters: RecordFilters | None = None) -> list[ContentRecord]:
        return apply_filters(self._records.values(), filters)

    def stats(self) -> RecordStats:
        return record_stats(self._records.values())

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ContentRecord]:
        return iter(tuple(self._records.values()))
