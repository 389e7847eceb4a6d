"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class WorkflowState(StrEnum):
    QUEUED = "Queued"
    IN_REVIEW = "InReview"
    APPROVED = "Approved"
    PUBLISHED = "Published"
    BLOCKED = "Blocked"


class Action(StrEnum):
    REVIEW = "review"
    APPROVE = "approve"
    PUBLISH = "publish"
    BLOCK = "block"


class Engine(StrEnum):
    """AI engine whose answer a record captures."""

    CHATGPT = "ChatGPT"
    GEMINI = "Gemini"
    PERPLEXITY = "Perplexity"


class Impact(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"
