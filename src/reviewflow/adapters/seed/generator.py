"""Deterministic generator for realistic review queues."""

from __future__ import annotations

import random
from datetime import timedelta
from typing import TYPE_CHECKING, Final, TypeVar
from uuid import UUID

from reviewflow.domain.model import ContentRecord, Engine, Impact, WorkflowState, utcnow

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from datetime import datetime

DEFAULT_RECORD_COUNT: Final[int] = 3000
DEFAULT_SEED: Final[int] = 42
DEFAULT_BLOCK_REASON: Final[str] = "Policy violation or content quality issue"
HISTORY_WINDOW: Final[timedelta] = timedelta(days=30)

T = TypeVar("T")

PROMPTS: Final[tuple[str, ...]] = (
    "Best enterprise CRM software for mid-market companies",
    "Top cloud infrastructure providers comparison",
    "Project management tools for remote teams review",
    "AI coding assistants comparison and recommendations",
    "Enterprise security best practices guide",
    "Best accounting software for small businesses",
    "Top HR management platforms comparison",
    "Cloud storage solutions for enterprise",
    "Best video conferencing tools for business",
    "Email marketing platforms comparison",
    "Customer support software recommendations",
    "Best ERP systems for manufacturing",
    "Top business intelligence tools review",
    "Cybersecurity solutions for startups",
    "Best payroll software comparison",
    "Top e-commerce platforms for B2B",
    "Data analytics tools for enterprises",
    "Best CMS platforms comparison",
    "Top collaboration tools for teams",
    "Marketing automation software guide",
    "Best inventory management systems",
    "Top sales enablement platforms",
    "Cloud backup solutions comparison",
    "Best document management systems",
    "Top workflow automation tools",
    "Enterprise search solutions review",
    "Best API management platforms",
    "Top identity management solutions",
    "Database management systems comparison",
    "Best monitoring and observability tools",
)

SAFETY_FLAGS: Final[tuple[str, ...]] = (
    "Pricing mismatch",
    "Competitor mentioned",
    "Outdated information",
    "Missing disclaimer",
    "Factual accuracy concern",
    "Brand voice deviation",
    "Legal review needed",
    "Source verification required",
    "Market data outdated",
    "Feature comparison incomplete",
)

STATUS_WEIGHTS: Final[Mapping[WorkflowState, float]] = {
    WorkflowState.QUEUED: 0.35,
    WorkflowState.IN_REVIEW: 0.25,
    WorkflowState.APPROVED: 0.20,
    WorkflowState.PUBLISHED: 0.15,
    WorkflowState.BLOCKED: 0.05,
}

IMPACT_WEIGHTS: Final[Mapping[Impact, float]] = {
    Impact.HIGH: 0.2,
    Impact.MEDIUM: 0.5,
    Impact.LOW: 0.3,
}


def _weighted(rng: random.Random, weights: Mapping[T, float]) -> T:
    options: Sequence[T] = list(weights)
    return rng.choices(options, weights=[weights[option] for option in options])[0]


def _record_id(rng: random.Random) -> str:
    return str(UUID(int=rng.getrandbits(128), version=4))


def generate_records(
    count: int = DEFAULT_RECORD_COUNT,
    seed: int = DEFAULT_SEED,
    *,
    now: datetime | None = None,
) -> list[ContentRecord]:
    """Generate ``count`` records reproducibly for ``seed``, newest first.

    Queued and in-review records carry up to three safety flags, others up to
    two. Blocked records come with a default block reason.
    """

    if count < 0:
        raise ValueError("count must be non-negative")

    rng = random.Random(seed)
    anchor = now or utcnow()
    records: list[ContentRecord] = []
    for _ in range(count):
        status = _weighted(rng, STATUS_WEIGHTS)
        impact = _weighted(rng, IMPACT_WEIGHTS)

        max_flags = 3 if status in {WorkflowState.QUEUED, WorkflowState.IN_REVIEW} else 2
        flags = tuple(rng.sample(SAFETY_FLAGS, rng.randint(0, max_flags)))

        prompt = rng.choice(PROMPTS)
        if rng.random() > 0.7:
            prompt = f"{prompt} {rng.choice((2024, 2025))}"

        records.append(
            ContentRecord(
                id=_record_id(rng),
                status=status,
                updated_at=anchor - HISTORY_WINDOW * rng.random(),
                block_reason=DEFAULT_BLOCK_REASON if status is WorkflowState.BLOCKED else None,
                prompt=prompt,
                engine=rng.choice(tuple(Engine)),
                impact=impact,
                safety_flags=flags,
            )
        )

    records.sort(key=lambda record: record.updated_at, reverse=True)
    return records
