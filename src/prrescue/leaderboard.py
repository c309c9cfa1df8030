"""Per-reviewer statistics over a set of pull request timelines."""
from __future__ import annotations

from collections.abc import Iterable

from .models import PullRequestTimeline, ReviewerStats, ReviewState

REVIEW_POINTS = {
    ReviewState.APPROVED: 50,
    ReviewState.CHANGES_REQUESTED: 30,
    ReviewState.COMMENTED: 10,
}
COMMENT_POINTS = 5
REACTION_POINTS = 2


def _stats_for(leaderboard: dict[str, ReviewerStats], username: str) -> ReviewerStats:
    if username not in leaderboard:
        leaderboard[username] = ReviewerStats(username=username)
    return leaderboard[username]


def aggregate_reviewers(timelines: Iterable[PullRequestTimeline]) -> dict[str, ReviewerStats]:
    """Fold timelines into per-actor review statistics.

    Only an actor's first review on a given PR is counted, so repeated
    re-reviews do not inflate the numbers. Plain comments and reactions are
    counted every time.
    """
    leaderboard: dict[str, ReviewerStats] = {}

    for pr in timelines:
        counted: set[str] = set()
        for review in pr.review_events:
            if review.actor in counted:
                continue
            counted.add(review.actor)

            stats = _stats_for(leaderboard, review.actor)
            stats.review_count += 1
            if review.state is ReviewState.APPROVED:
                stats.approvals += 1
            elif review.state is ReviewState.CHANGES_REQUESTED:
                stats.changes_requested += 1
            else:
                stats.review_comments += 1
            stats.points += REVIEW_POINTS[review.state]

        for comment in pr.comment_events:
            stats = _stats_for(leaderboard, comment.actor)
            stats.plain_comments += 1
            stats.points += COMMENT_POINTS

        for reaction in pr.reaction_events:
            stats = _stats_for(leaderboard, reaction.actor)
            stats.reaction_count += 1
            stats.points += REACTION_POINTS

    return leaderboard
