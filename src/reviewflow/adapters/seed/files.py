"""JSON-lines seed files."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from .schema import RecordPayload
from .translator import parse_record, to_payload

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from reviewflow.domain.model import ContentRecord

log = getLogger(__name__)


class SeedFileError(ValueError):
    """Raised when a seed file line cannot be parsed."""

    def __init__(self, path: Path, line_number: int, detail: str) -> None:
        super().__init__(f"{path}:{line_number}: {detail}")
        self.path = path
        self.line_number = line_number


def read_records(path: Path) -> list[ContentRecord]:
    """Load records from ``path``, skipping blank lines."""

    records: list[ContentRecord] = []
    with path.open(encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            try:
                payload = RecordPayload.model_validate_json(line)
            except ValidationError as exc:
                raise SeedFileError(path, line_number, str(exc)) from exc
            records.append(parse_record(payload))
    log.info("Loaded %s records from %s", len(records), path)
    return records


def write_records(path: Path, records: Iterable[ContentRecord]) -> int:
    """Write ``records`` to ``path`` and return how many were written."""

    written = 0
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        for record in records:
            handle.write(to_payload(record).model_dump_json(by_alias=True, exclude_none=True))
            handle.write("\n")
            written += 1
    log.info("Wrote %s records to %s", written, path)
    return written
