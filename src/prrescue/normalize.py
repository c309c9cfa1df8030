"""Turn raw GraphQL pull request nodes into immutable timelines."""
from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from .errors import MalformedResponseError
from .models import CommentEvent, PullRequestTimeline, ReactionEvent, ReviewEvent, ReviewState

logger = logging.getLogger(__name__)


def parse_timestamp(value: str) -> datetime:
    """Parse a GitHub ISO-8601 timestamp into an aware UTC datetime."""
    if not isinstance(value, str):
        raise MalformedResponseError(f"Expected an ISO-8601 timestamp, got {value!r}")
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise MalformedResponseError(f"Invalid timestamp {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _login(actor: dict[str, Any] | None) -> str | None:
    if not actor:
        return None
    return actor.get("login") or None


def _nodes(node: dict[str, Any], key: str) -> list[dict[str, Any]]:
    conn = node.get(key)
    if not conn:
        return []
    return conn.get("nodes") or []


def normalize_pull_request(node: dict[str, Any]) -> PullRequestTimeline:
    try:
        number = node["number"]
        reviews: list[ReviewEvent] = []
        for review in _nodes(node, "reviews"):
            actor = _login(review.get("author"))
            submitted_at = review.get("submittedAt")
            if actor is None or submitted_at is None:
                logger.debug("Dropping unattributed or pending review on PR #%s", number)
                continue
            reviews.append(
                ReviewEvent(
                    actor=actor,
                    state=ReviewState.parse(review.get("state")),
                    submitted_at=parse_timestamp(submitted_at),
                )
            )

        comments: list[CommentEvent] = []
        for comment in _nodes(node, "comments"):
            actor = _login(comment.get("author"))
            if actor is None:
                logger.debug("Dropping unattributed comment on PR #%s", number)
                continue
            comments.append(CommentEvent(actor=actor, posted_at=parse_timestamp(comment["createdAt"])))

        reactions: list[ReactionEvent] = []
        for reaction in _nodes(node, "reactions"):
            actor = _login(reaction.get("user"))
            if actor is None:
                continue
            reactions.append(
                ReactionEvent(
                    actor=actor,
                    content=reaction.get("content", ""),
                    reacted_at=parse_timestamp(reaction["createdAt"]),
                )
            )

        return PullRequestTimeline(
            number=number,
            title=node["title"],
            url=node["url"],
            created_at=parse_timestamp(node["createdAt"]),
            review_events=tuple(reviews),
            comment_events=tuple(comments),
            reaction_events=tuple(reactions),
        )
    except (KeyError, TypeError, AttributeError) as exc:
        raise MalformedResponseError(f"Unexpected pull request node shape: {exc!r}") from exc


def normalize(nodes: Iterable[dict[str, Any]]) -> list[PullRequestTimeline]:
    return [normalize_pull_request(node) for node in nodes]
