"""Translate seed payloads to and from domain records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from reviewflow.domain.model import ContentRecord

from .schema import RecordPayload

if TYPE_CHECKING:
    from collections.abc import Mapping


def parse_record(payload: RecordPayload | Mapping[str, object]) -> ContentRecord:
    model = payload if isinstance(payload, RecordPayload) else RecordPayload.model_validate(payload)
    return ContentRecord(
        id=model.id,
        status=model.status,
        updated_at=model.updated_at,
        block_reason=model.block_reason,
        prompt=model.prompt,
        engine=model.engine,
        impact=model.impact,
        safety_flags=tuple(model.safety_flags),
    )


def to_payload(record: ContentRecord) -> RecordPayload:
    return RecordPayload(
        id=record.id,
        prompt=record.prompt,
        engine=record.engine,
        status=record.status,
        impact=record.impact,
        safety_flags=list(record.safety_flags),
        updated_at=record.updated_at,
        block_reason=record.block_reason,
    )
