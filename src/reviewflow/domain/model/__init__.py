"""Public domain model surface."""

from __future__ import annotations

from reviewflow.domain.model.enums import Action, Engine, Impact, WorkflowState
from reviewflow.domain.model.record import ContentRecord, utcnow

__all__ = [
    "Action",
    "ContentRecord",
    "Engine",
    "Impact",
    "WorkflowState",
    "utcnow",
]
