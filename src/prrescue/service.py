from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from .client import DEFAULT_MAX_PAGES, DEFAULT_PAGE_SIZE, GitHubClient
from .leaderboard import aggregate_reviewers
from .models import PRWithStatus, PullRequestTimeline, RescuerStats, ReviewerStats, TimeUnit
from .normalize import normalize, normalize_pull_request
from .queries import ACTIVITY_QUERY, OPEN_PR_QUERY
from .ranking import NEGLECTED_LIMIT, rank_by_points, rank_neglected
from .rescue import RescueConfig, score_rescues
from .staleness import DEFAULT_POLICY, get_policy
from .thresholds import age_between

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


class RescueService:
    """Leaderboards and neglected-PR lists for one repository.

    Every public method is an independent run: it fetches, folds into fresh
    accumulators, and ranks. Fetch errors propagate; nothing partial is
    returned.
    """

    def __init__(
        self,
        client: GitHubClient,
        owner: str,
        repo: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_pages: int = DEFAULT_MAX_PAGES,
        policy: str = DEFAULT_POLICY,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self.owner = owner
        self.repo = repo
        self.page_size = page_size
        self.max_pages = max_pages
        self._policy = get_policy(policy)
        self._clock = clock or _utcnow

    def _timelines(self, query: str) -> list[PullRequestTimeline]:
        nodes = self._client.fetch_pull_requests(
            self.owner, self.repo, query, page_size=self.page_size, max_pages=self.max_pages
        )
        timelines = normalize(nodes)
        logger.debug("Normalized %d pull requests from %s/%s", len(timelines), self.owner, self.repo)
        return timelines

    def get_leaderboard(self) -> list[ReviewerStats]:
        return rank_by_points(aggregate_reviewers(self._timelines(ACTIVITY_QUERY)).values())

    def get_top_reviewers(self, limit: int = 10) -> list[ReviewerStats]:
        return rank_by_points(self.get_leaderboard(), limit)

    def get_rescue_leaderboard(
        self,
        min_age: float = 7,
        time_unit: TimeUnit | str = TimeUnit.DAYS,
        count_comments: bool = True,
    ) -> list[RescuerStats]:
        config = RescueConfig(min_age=min_age, time_unit=TimeUnit(time_unit), count_comments=count_comments)
        return rank_by_points(score_rescues(self._timelines(ACTIVITY_QUERY), config).values())

    def get_top_rescuers(
        self,
        limit: int = 10,
        min_age: float = 7,
        time_unit: TimeUnit | str = TimeUnit.DAYS,
        count_comments: bool = True,
    ) -> list[RescuerStats]:
        return rank_by_points(self.get_rescue_leaderboard(min_age, time_unit, count_comments), limit)

    def _with_status(self, pr: PullRequestTimeline, time_unit: TimeUnit, now: datetime) -> PRWithStatus:
        age = int(age_between(pr.created_at, now, time_unit))
        review_count = len(pr.review_events)
        comment_count = len(pr.comment_events)
        return PRWithStatus(
            number=pr.number,
            title=pr.title,
            url=pr.url,
            created_at=pr.created_at,
            review_count=review_count,
            comment_count=comment_count,
            age=age,
            time_unit=time_unit,
            status=self._policy.classify(age, review_count, comment_count, time_unit),
        )

    def fetch_stale_prs(
        self,
        stale_age: float = 7,
        time_unit: TimeUnit | str = TimeUnit.DAYS,
        only_unreviewed: bool = True,
    ) -> list[PRWithStatus]:
        """Open PRs at least ``stale_age`` old, in source order."""
        time_unit = TimeUnit(time_unit)
        now = self._clock()
        stale: list[PRWithStatus] = []
        for pr in self._timelines(OPEN_PR_QUERY):
            if age_between(pr.created_at, now, time_unit) < stale_age:
                continue
            if only_unreviewed and pr.review_events:
                continue
            stale.append(self._with_status(pr, time_unit, now))
        return stale

    def get_top_neglected_prs(
        self,
        min_age: float = 7,
        time_unit: TimeUnit | str = TimeUnit.DAYS,
        only_unreviewed: bool = True,
        limit: int = NEGLECTED_LIMIT,
    ) -> list[PRWithStatus]:
        return rank_neglected(self.fetch_stale_prs(min_age, time_unit, only_unreviewed), limit)

    def get_pr_status(self, number: int, time_unit: TimeUnit | str = TimeUnit.DAYS) -> PRWithStatus:
        node = self._client.fetch_pull_request(self.owner, self.repo, number)
        return self._with_status(normalize_pull_request(node), TimeUnit(time_unit), self._clock())
