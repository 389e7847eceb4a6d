"""Operator-facing notices for settled mutations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from reviewflow.domain.model import Action
from reviewflow.domain.ports.notifying import Notice, NoticeLevel

if TYPE_CHECKING:
    from reviewflow.domain.mutations.errors import MutationError

SUCCESS_TITLES: Final[dict[Action, str]] = {
    Action.REVIEW: "Started review",
    Action.APPROVE: "Approved",
    Action.PUBLISH: "Published",
    Action.BLOCK: "Blocked",
}

PAST_TENSE: Final[dict[Action, str]] = {
    Action.REVIEW: "reviewed",
    Action.APPROVE: "approved",
    Action.PUBLISH: "published",
    Action.BLOCK: "blocked",
}


def success_notice(action: Action) -> Notice:
    return Notice(
        level=NoticeLevel.SUCCESS,
        title=SUCCESS_TITLES[action],
        description=f"Record successfully {PAST_TENSE[action]}.",
    )


def failure_notice(error: MutationError) -> Notice:
    return Notice(
        level=NoticeLevel.ERROR,
        title=f"Failed to {error.action}",
        description=str(error),
    )


class LoggingNotifier:
    """Default notifier writing notices to the log."""

    _LEVELS: Final[dict[NoticeLevel, int]] = {
        NoticeLevel.SUCCESS: logging.INFO,
        NoticeLevel.WARNING: logging.WARNING,
        NoticeLevel.ERROR: logging.ERROR,
    }

    def __init__(self, logger_name: str = __name__) -> None:
        self._log = logging.getLogger(logger_name)

    def __call__(self, notice: Notice) -> None:
        self._log.log(self._LEVELS[notice.level], "%s: %s", notice.title, notice.description)


class CollectingNotifier:
    """Keeps notices in memory, e.g. for a status bar or for inspection."""

    def __init__(self) -> None:
        self.notices: list[Notice] = []

    def __call__(self, notice: Notice) -> None:
        self.notices.append(notice)
