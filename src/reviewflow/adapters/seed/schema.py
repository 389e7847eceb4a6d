"""Pydantic models describing serialized record payloads."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from reviewflow.domain.model import Engine, Impact, WorkflowState


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class SeedBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class RecordPayload(SeedBaseModel):
    """One record as exchanged in seed files (camelCase keys)."""

    id: str = Field(min_length=1)
    prompt: str = ""
    engine: Engine
    status: WorkflowState
    impact: Impact
    safety_flags: list[str] = Field(default_factory=list, alias="safetyFlags")
    updated_at: datetime = Field(alias="updatedAt")
    block_reason: str | None = Field(default=None, alias="blockReason")

    _normalize_reason = field_validator("block_reason", mode="before")(_blank_to_none)

    @field_validator("updated_at")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
