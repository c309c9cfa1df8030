from __future__ import annotations

from collections.abc import Iterable
from typing import TypeVar

from .models import PRWithStatus, RescuerStats, ReviewerStats

# Ten cards fit the neglected-PR board.
NEGLECTED_LIMIT = 10

StatsT = TypeVar("StatsT", ReviewerStats, RescuerStats)


def rank_by_points(stats: Iterable[StatsT], limit: int | None = None) -> list[StatsT]:
    ranked = sorted(stats, key=lambda s: s.points, reverse=True)
    if limit is not None:
        if limit < 0:
            raise ValueError(f"limit must not be negative, got {limit}")
        ranked = ranked[:limit]
    return ranked


def rank_neglected(prs: Iterable[PRWithStatus], limit: int = NEGLECTED_LIMIT) -> list[PRWithStatus]:
    """Most urgent first, then oldest first."""
    ranked = sorted(prs, key=lambda pr: (-pr.status.urgency.rank, -pr.age, pr.created_at))
    return ranked[:limit]
