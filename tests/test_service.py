"""Tests for RescueService, the engine facade."""
from __future__ import annotations

from datetime import timedelta
from unittest.mock import MagicMock

import httpx
import pytest

from prrescue.client import GitHubClient
from prrescue.errors import AuthError, NetworkError
from prrescue.models import TimeUnit, Urgency
from prrescue.queries import ACTIVITY_QUERY, OPEN_PR_QUERY
from prrescue.service import RescueService

from .conftest import (
    NOW,
    comment_node,
    days_ago,
    iso,
    pr_by_number_response,
    pr_list_response,
    pr_node,
    review_node,
)

GQL_URL = "https://api.github.com/graphql"


def _service(nodes, **kwargs) -> tuple[RescueService, MagicMock]:
    client = MagicMock()
    client.fetch_pull_requests.return_value = iter(nodes)
    return RescueService(client, "owner", "repo", clock=lambda: NOW, **kwargs), client


def _aged_pr(number: int, age_days: float, reviews: int = 0, comments: int = 0) -> dict:
    created = days_ago(age_days)
    return pr_node(
        number=number,
        created_at=iso(created),
        review_nodes=[review_node(f"r{i}", "APPROVED", iso(created + timedelta(hours=1))) for i in range(reviews)],
        comment_nodes=[comment_node(f"c{i}", iso(created + timedelta(hours=1))) for i in range(comments)],
    )


class TestLeaderboard:
    def test_ranks_reviewers_by_points(self):
        nodes = [
            pr_node(number=1, review_nodes=[review_node("alice", "COMMENTED"), review_node("bob", "APPROVED")]),
            pr_node(number=2, comment_nodes=[comment_node("carol")]),
        ]
        service, client = _service(nodes)
        board = service.get_leaderboard()
        assert [s.username for s in board] == ["bob", "alice", "carol"]
        client.fetch_pull_requests.assert_called_once_with(
            "owner", "repo", ACTIVITY_QUERY, page_size=30, max_pages=6
        )

    def test_top_reviewers_truncates(self):
        nodes = [pr_node(number=i, review_nodes=[review_node(f"user{i}")]) for i in range(15)]
        service, _ = _service(nodes)
        assert len(service.get_top_reviewers(limit=10)) == 10

    def test_page_budget_is_forwarded(self):
        service, client = _service([], page_size=10, max_pages=2)
        service.get_leaderboard()
        assert client.fetch_pull_requests.call_args.kwargs == {"page_size": 10, "max_pages": 2}

    def test_empty_repository_gives_empty_results(self):
        service, _ = _service([])
        assert service.get_leaderboard() == []

    def test_fetch_failure_propagates(self):
        client = MagicMock()
        client.fetch_pull_requests.side_effect = NetworkError("down")
        service = RescueService(client, "owner", "repo", clock=lambda: NOW)
        with pytest.raises(NetworkError):
            service.get_leaderboard()


class TestRescuers:
    def test_scores_rescue_at_action_age(self):
        created = days_ago(20)
        node = pr_node(
            created_at=iso(created),
            review_nodes=[review_node("alice", "APPROVED", iso(created + timedelta(days=15)))],
        )
        service, _ = _service([node])
        [stats] = service.get_top_rescuers(min_age=7, time_unit="days")
        assert stats.username == "alice"
        assert stats.critical_rescues == 1
        assert stats.points == 100
        assert stats.approvals == 1

    def test_count_comments_flag(self):
        created = days_ago(20)
        node = pr_node(
            created_at=iso(created),
            comment_nodes=[comment_node("bob", iso(created + timedelta(days=8)))],
        )
        service, _ = _service([node])
        assert service.get_rescue_leaderboard(count_comments=False) == []


class TestNeglected:
    def test_stale_prs_use_open_query_and_filter_by_age(self):
        nodes = [_aged_pr(1, 20), _aged_pr(2, 2)]
        service, client = _service(nodes)
        stale = service.fetch_stale_prs(stale_age=7)
        assert [pr.number for pr in stale] == [1]
        assert stale[0].age == 20
        assert stale[0].time_unit is TimeUnit.DAYS
        assert client.fetch_pull_requests.call_args.args[2] == OPEN_PR_QUERY

    def test_only_unreviewed_skips_reviewed(self):
        nodes = [_aged_pr(1, 20, reviews=1), _aged_pr(2, 20, comments=2)]
        service, _ = _service(nodes)
        assert [pr.number for pr in service.fetch_stale_prs()] == [2]

    def test_include_reviewed_marks_them_normal(self):
        service, _ = _service([_aged_pr(1, 20, reviews=1)])
        [pr] = service.fetch_stale_prs(only_unreviewed=False)
        assert pr.status.urgency is Urgency.NORMAL
        assert pr.review_count == 1

    def test_top_neglected_ranked_and_capped(self):
        nodes = [_aged_pr(n, age) for n, age in enumerate([8, 30, 4, 15, 9, 50, 3.5, 10, 12, 20, 25, 40], start=1)]
        service, _ = _service(nodes)
        top = service.get_top_neglected_prs(min_age=3)
        assert len(top) == 10
        assert [pr.number for pr in top[:5]] == [6, 12, 2, 11, 10]
        assert all(
            (a.status.urgency.rank, a.age) >= (b.status.urgency.rank, b.age) for a, b in zip(top, top[1:])
        )

    def test_discussed_pr_status_mentions_comments(self):
        service, _ = _service([_aged_pr(1, 10, comments=3)])
        [pr] = service.get_top_neglected_prs()
        assert pr.status.urgency is Urgency.URGENT
        assert pr.comment_count == 3
        assert "comments" in pr.status.message

    def test_hours_mode(self):
        service, _ = _service([_aged_pr(1, 0.3)])
        [pr] = service.get_top_neglected_prs(min_age=1, time_unit="hours")
        assert pr.age == 7
        assert pr.status.urgency is Urgency.CRITICAL

    def test_total_activity_policy(self):
        service, _ = _service([_aged_pr(1, 20, comments=1)], policy="total-activity")
        [pr] = service.get_top_neglected_prs()
        assert pr.status.urgency is Urgency.URGENT

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError):
            RescueService(MagicMock(), "owner", "repo", policy="nope")

    def test_empty_gives_empty_list(self):
        service, _ = _service([])
        assert service.get_top_neglected_prs() == []


class TestPrStatus:
    def test_single_pr_status(self):
        client = MagicMock()
        client.fetch_pull_request.return_value = _aged_pr(42, 16, comments=1)
        service = RescueService(client, "owner", "repo", clock=lambda: NOW)
        pr = service.get_pr_status(42)
        client.fetch_pull_request.assert_called_once_with("owner", "repo", 42)
        assert pr.number == 42
        assert pr.status.urgency is Urgency.CRITICAL


class TestOverHttp:
    def test_empty_source_end_to_end(self, respx_mock):
        respx_mock.post(GQL_URL).mock(return_value=httpx.Response(200, json=pr_list_response([])))
        with GitHubClient("token") as client:
            service = RescueService(client, "owner", "repo", clock=lambda: NOW)
            assert service.get_leaderboard() == []
            assert service.get_top_neglected_prs() == []

    def test_mid_scan_error_returns_no_partial_leaderboard(self, respx_mock):
        page1 = pr_list_response([pr_node(review_nodes=[review_node("alice")])], has_next_page=True, end_cursor="c1")
        respx_mock.post(GQL_URL).mock(side_effect=[httpx.Response(200, json=page1), httpx.Response(401)])
        with GitHubClient("token") as client:
            service = RescueService(client, "owner", "repo", clock=lambda: NOW)
            with pytest.raises(AuthError):
                service.get_leaderboard()

    def test_pr_status_over_http(self, respx_mock):
        respx_mock.post(GQL_URL).mock(
            return_value=httpx.Response(200, json=pr_by_number_response(_aged_pr(3, 5)))
        )
        with GitHubClient("token") as client:
            pr = RescueService(client, "owner", "repo", clock=lambda: NOW).get_pr_status(3)
        assert pr.status.urgency is Urgency.WARNING
