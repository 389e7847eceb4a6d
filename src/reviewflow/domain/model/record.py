"""The record moving through the approval workflow."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from reviewflow.domain.model.enums import Engine, Impact, WorkflowState


def utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True, frozen=True, kw_only=True)
class ContentRecord:
    """One reviewable piece of generated content.

    Records are immutable values: every write produces a new instance through
    :meth:`with_status`, so a reference held by a reader is a stable snapshot.
    """

    id: str
    status: WorkflowState
    updated_at: datetime = field(default_factory=utcnow)
    block_reason: str | None = None

    prompt: str = ""
    engine: Engine = Engine.CHATGPT
    impact: Impact = Impact.MEDIUM
    safety_flags: tuple[str, ...] = ()

    def with_status(
        self,
        status: WorkflowState,
        *,
        block_reason: str | None = None,
        replace_reason: bool = False,
        updated_at: datetime | None = None,
    ) -> ContentRecord:
        """Return a copy in ``status`` with a refreshed ``updated_at``.

        The reason is kept unless ``replace_reason`` is set.
        """

        return replace(
            self,
            status=status,
            updated_at=updated_at or utcnow(),
            block_reason=block_reason if replace_reason else self.block_reason,
        )
