"""Shared factories and fixtures for the test suite."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from prrescue.models import (
    CommentEvent,
    PRStatus,
    PRWithStatus,
    PullRequestTimeline,
    ReactionEvent,
    ReviewEvent,
    ReviewState,
    TimeUnit,
    Urgency,
)

NOW = datetime(2024, 6, 30, 12, 0, 0, tzinfo=timezone.utc)


def iso(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


def days_ago(days: float) -> datetime:
    return NOW - timedelta(days=days)


# ---------------------------------------------------------------------------
# GraphQL node factories: return raw dicts that mirror API responses
# ---------------------------------------------------------------------------


def rate_limit_data(remaining: int = 4999) -> dict:
    return {"cost": 1, "remaining": remaining, "resetAt": "2024-12-31T23:59:59Z"}


def review_node(
    author: str | None = "reviewer",
    state: str = "APPROVED",
    submitted_at: str | None = "2024-01-02T00:00:00Z",
) -> dict:
    return {
        "state": state,
        "submittedAt": submitted_at,
        "author": {"login": author} if author else None,
    }


def comment_node(
    author: str | None = "commenter",
    created_at: str = "2024-01-02T00:00:00Z",
) -> dict:
    return {
        "createdAt": created_at,
        "author": {"login": author} if author else None,
    }


def reaction_node(
    user: str | None = "fan",
    content: str = "THUMBS_UP",
    created_at: str = "2024-01-02T00:00:00Z",
) -> dict:
    return {
        "content": content,
        "createdAt": created_at,
        "user": {"login": user} if user else None,
    }


def pr_node(
    number: int = 1,
    title: str = "Fix bug",
    created_at: str = "2024-01-01T00:00:00Z",
    review_nodes: list[dict] | None = None,
    comment_nodes: list[dict] | None = None,
    reaction_nodes: list[dict] | None = None,
) -> dict:
    return {
        "number": number,
        "title": title,
        "url": f"https://github.com/owner/repo/pull/{number}",
        "createdAt": created_at,
        "reviews": {"nodes": review_nodes or []},
        "comments": {"nodes": comment_nodes or []},
        "reactions": {"nodes": reaction_nodes or []},
    }


def pr_list_response(
    pr_nodes: list[dict],
    has_next_page: bool = False,
    end_cursor: str | None = None,
    remaining: int = 4999,
) -> dict:
    return {
        "data": {
            "rateLimit": rate_limit_data(remaining),
            "repository": {
                "pullRequests": {
                    "pageInfo": {"hasNextPage": has_next_page, "endCursor": end_cursor},
                    "nodes": pr_nodes,
                }
            },
        }
    }


def pr_by_number_response(node: dict | None, remaining: int = 4999) -> dict:
    return {
        "data": {
            "rateLimit": rate_limit_data(remaining),
            "repository": {"pullRequest": node},
        }
    }


# ---------------------------------------------------------------------------
# Model object factories: construct typed model instances
# ---------------------------------------------------------------------------


def make_review(
    actor: str = "reviewer",
    state: ReviewState = ReviewState.APPROVED,
    submitted_at: datetime | None = None,
) -> ReviewEvent:
    return ReviewEvent(actor=actor, state=state, submitted_at=submitted_at or NOW)


def make_comment(actor: str = "commenter", posted_at: datetime | None = None) -> CommentEvent:
    return CommentEvent(actor=actor, posted_at=posted_at or NOW)


def make_reaction(actor: str = "fan", content: str = "HEART") -> ReactionEvent:
    return ReactionEvent(actor=actor, content=content, reacted_at=NOW)


def make_timeline(
    number: int = 1,
    title: str = "Fix bug",
    created_at: datetime | None = None,
    reviews: list[ReviewEvent] | None = None,
    comments: list[CommentEvent] | None = None,
    reactions: list[ReactionEvent] | None = None,
) -> PullRequestTimeline:
    return PullRequestTimeline(
        number=number,
        title=title,
        url=f"https://github.com/owner/repo/pull/{number}",
        created_at=created_at or days_ago(30),
        review_events=tuple(reviews or []),
        comment_events=tuple(comments or []),
        reaction_events=tuple(reactions or []),
    )


def make_pr_with_status(
    number: int = 1,
    urgency: Urgency = Urgency.CRITICAL,
    age: int = 20,
    created_at: datetime | None = None,
    review_count: int = 0,
    comment_count: int = 0,
) -> PRWithStatus:
    return PRWithStatus(
        number=number,
        title=f"PR {number}",
        url=f"https://github.com/owner/repo/pull/{number}",
        created_at=created_at or days_ago(age),
        review_count=review_count,
        comment_count=comment_count,
        age=age,
        time_unit=TimeUnit.DAYS,
        status=PRStatus(urgency=urgency, message=f"{urgency.value} message", color=0xFF0000, emoji="🔥"),
    )


# ---------------------------------------------------------------------------
# Autouse fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def no_dotenv(mocker):
    """Prevent tests from loading a real .env file."""
    mocker.patch("prrescue.cli.load_dotenv")
