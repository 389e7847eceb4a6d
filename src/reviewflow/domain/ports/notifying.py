"""Port for surfacing terminal mutation notices to the operator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol, runtime_checkable


class NoticeLevel(StrEnum):
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class Notice:
    level: NoticeLevel
    title: str
    description: str


@runtime_checkable
class MutationNotifier(Protocol):
    def __call__(self, notice: Notice) -> None: ...
