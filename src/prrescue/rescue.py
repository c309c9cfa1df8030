"""Credit reviewers who act on pull requests that had already gone stale.

An action is scored by how old the PR was *when the action happened*, not by
how old it is now. Formal reviews earn the tier's full base; commented reviews
and plain comments earn half of it.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from .models import PullRequestTimeline, RescuerStats, ReviewState, TimeUnit, Urgency
from .thresholds import age_between, tier_for_age

TIER_POINTS = {
    Urgency.CRITICAL: 100,
    Urgency.URGENT: 50,
    Urgency.WARNING: 25,
}


@dataclass(frozen=True)
class RescueConfig:
    min_age: float = 7
    time_unit: TimeUnit = TimeUnit.DAYS
    count_comments: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "time_unit", TimeUnit(self.time_unit))
        if self.min_age < 0:
            raise ValueError(f"min_age must not be negative, got {self.min_age}")


def rescue_points(tier: Urgency, formal: bool) -> int:
    base = TIER_POINTS[tier]
    return base if formal else base // 2


def _stats_for(rescuers: dict[str, RescuerStats], username: str) -> RescuerStats:
    if username not in rescuers:
        rescuers[username] = RescuerStats(username=username)
    return rescuers[username]


def _credit(stats: RescuerStats, tier: Urgency, points: int) -> None:
    stats.rescue_count += 1
    if tier is Urgency.CRITICAL:
        stats.critical_rescues += 1
    elif tier is Urgency.URGENT:
        stats.urgent_rescues += 1
    else:
        stats.warning_rescues += 1
    stats.points += points


def _qualifying_tier(pr: PullRequestTimeline, when: datetime, config: RescueConfig) -> Urgency | None:
    age = age_between(pr.created_at, when, config.time_unit)
    if age < config.min_age:
        return None
    tier = tier_for_age(age, config.time_unit)
    if tier is Urgency.NORMAL:
        return None
    return tier


def score_rescues(
    timelines: Iterable[PullRequestTimeline],
    config: RescueConfig | None = None,
) -> dict[str, RescuerStats]:
    config = config or RescueConfig()
    rescuers: dict[str, RescuerStats] = {}

    for pr in timelines:
        credited: set[str] = set()
        for review in pr.review_events:
            if review.actor in credited:
                continue
            tier = _qualifying_tier(pr, review.submitted_at, config)
            if tier is None:
                continue
            credited.add(review.actor)

            stats = _stats_for(rescuers, review.actor)
            _credit(stats, tier, rescue_points(tier, review.state.is_formal))
            if review.state is ReviewState.APPROVED:
                stats.approvals += 1
            elif review.state is ReviewState.CHANGES_REQUESTED:
                stats.changes_requested += 1
            else:
                stats.comments += 1

        if not config.count_comments:
            continue
        for comment in pr.comment_events:
            # the review already credited this rescue; comments are not deduplicated among themselves
            if comment.actor in credited:
                continue
            tier = _qualifying_tier(pr, comment.posted_at, config)
            if tier is None:
                continue
            stats = _stats_for(rescuers, comment.actor)
            _credit(stats, tier, rescue_points(tier, formal=False))
            stats.comments += 1

    return rescuers
