"""Workflow state machine for record approval.

The machine is a pure lookup over :data:`TRANSITIONS`. It keeps no state of its
own, so callers must pass the record status as it is *now* (including any
optimistic writes already applied), never a status captured earlier.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from reviewflow.domain.model import Action, WorkflowState

ANY_STATUS_LABEL: Final[str] = "any status"


@dataclass(slots=True, frozen=True)
class Transition:
    sources: frozenset[WorkflowState]
    action: Action
    target: WorkflowState


TRANSITIONS: Final[tuple[Transition, ...]] = (
    Transition(frozenset({WorkflowState.QUEUED}), Action.REVIEW, WorkflowState.IN_REVIEW),
    Transition(frozenset({WorkflowState.IN_REVIEW}), Action.APPROVE, WorkflowState.APPROVED),
    Transition(frozenset({WorkflowState.APPROVED}), Action.PUBLISH, WorkflowState.PUBLISHED),
    Transition(
        frozenset(
            {
                WorkflowState.QUEUED,
                WorkflowState.IN_REVIEW,
                WorkflowState.APPROVED,
                WorkflowState.PUBLISHED,
            }
        ),
        Action.BLOCK,
        WorkflowState.BLOCKED,
    ),
)

_TABLE: Final[dict[tuple[WorkflowState, Action], WorkflowState]] = {
    (source, transition.action): transition.target
    for transition in TRANSITIONS
    for source in transition.sources
}


def next_state(current: WorkflowState, action: Action) -> WorkflowState | None:
    """Return the state ``action`` leads to from ``current``, or ``None`` if rejected."""

    return _TABLE.get((current, action))


def is_valid_action(current: WorkflowState, action: Action) -> bool:
    return next_state(current, action) is not None


def available_actions(current: WorkflowState) -> tuple[Action, ...]:
    return tuple(action for action in Action if (current, action) in _TABLE)


def required_states(action: Action) -> frozenset[WorkflowState]:
    """States from which ``action`` is accepted."""

    return frozenset(source for (source, candidate) in _TABLE if candidate is action)


def required_state_label(action: Action) -> str:
    """Human-readable originating state for ``action``.

    Actions accepted from more than one state (``block``) are labelled
    ``"any status"``.
    """

    sources = required_states(action)
    if len(sources) == 1:
        return next(iter(sources)).value
    return ANY_STATUS_LABEL
