"""Neglect urgency of an open pull request.

Two policies are available behind the same ``classify`` signature:

``review-first`` (the default)
    Any formal review marks the PR as safe regardless of age. Only PRs that
    are unreviewed, whether they were discussed or not, can reach an elevated
    urgency.

``total-activity``
    Reviews and comments are added into one activity count before the age
    thresholds are applied. A PR with a little discussion is demoted one
    tier instead of being cleared.
"""
from __future__ import annotations

import math
from typing import Protocol

from .models import PRStatus, TimeUnit, Urgency
from .thresholds import thresholds_for

DEFAULT_POLICY = "review-first"
LOW_ACTIVITY = 3

_COLORS = {
    Urgency.CRITICAL: 0xFF0000,
    Urgency.URGENT: 0xFF8800,
    Urgency.WARNING: 0xFFFF00,
    Urgency.NORMAL: 0x00FF00,
}
_EMOJI = {
    Urgency.CRITICAL: "🔥",
    Urgency.URGENT: "🟠",
    Urgency.WARNING: "🟡",
    Urgency.NORMAL: "🟢",
}
_LABELS = {
    Urgency.CRITICAL: "Critical",
    Urgency.URGENT: "Urgent",
    Urgency.WARNING: "Needs attention",
}


class StalenessPolicy(Protocol):
    name: str

    def classify(
        self, age: float, review_count: int, comment_count: int, time_unit: TimeUnit | str
    ) -> PRStatus: ...


def _status(urgency: Urgency, message: str, emoji: str | None = None) -> PRStatus:
    return PRStatus(urgency=urgency, message=message, color=_COLORS[urgency], emoji=emoji or _EMOJI[urgency])


def _age_label(age: float, time_unit: TimeUnit | str) -> str:
    return f"{math.floor(age)}{TimeUnit(time_unit).suffix}"


def _pending(urgency: Urgency, age: float, comment_count: int, time_unit: TimeUnit | str) -> PRStatus:
    label = _LABELS[urgency]
    waited = _age_label(age, time_unit)
    if comment_count > 0:
        plural = "" if comment_count == 1 else "s"
        return _status(
            urgency, f"{label}: discussed ({comment_count} comment{plural}) but not reviewed for {waited}"
        )
    return _status(urgency, f"{label}: no activity for {waited}")


class ReviewFirstPolicy:
    name = "review-first"

    def classify(
        self, age: float, review_count: int, comment_count: int, time_unit: TimeUnit | str
    ) -> PRStatus:
        if review_count > 0:
            return _status(Urgency.NORMAL, "Reviewed", emoji="✅")

        limits = thresholds_for(time_unit)
        if age >= limits.critical:
            return _pending(Urgency.CRITICAL, age, comment_count, time_unit)
        if age >= limits.urgent:
            return _pending(Urgency.URGENT, age, comment_count, time_unit)
        if age >= limits.warning:
            return _pending(Urgency.WARNING, age, comment_count, time_unit)
        return _status(Urgency.NORMAL, "New PR")


class TotalActivityPolicy:
    name = "total-activity"

    def classify(
        self, age: float, review_count: int, comment_count: int, time_unit: TimeUnit | str
    ) -> PRStatus:
        limits = thresholds_for(time_unit)
        activity = review_count + comment_count
        waited = _age_label(age, time_unit)

        if activity == 0:
            if age >= limits.critical:
                return _status(Urgency.CRITICAL, f"Critical: no activity for {waited}")
            if age >= limits.urgent:
                return _status(Urgency.URGENT, f"Urgent: no activity for {waited}")
            if age >= limits.warning:
                return _status(Urgency.WARNING, f"Needs attention: no activity for {waited}")
        elif activity < LOW_ACTIVITY:
            if age >= limits.critical:
                return _status(Urgency.URGENT, f"Urgent: only {activity} interaction(s) in {waited}")
            if age >= limits.warning:
                return _status(Urgency.WARNING, f"Needs attention: only {activity} interaction(s) in {waited}")
        if activity > 0:
            return _status(Urgency.NORMAL, "Active")
        return _status(Urgency.NORMAL, "New PR")


_POLICIES: dict[str, StalenessPolicy] = {
    ReviewFirstPolicy.name: ReviewFirstPolicy(),
    TotalActivityPolicy.name: TotalActivityPolicy(),
}

POLICY_NAMES = tuple(_POLICIES)


def get_policy(name: str) -> StalenessPolicy:
    try:
        return _POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown staleness policy: {name!r}") from None


def classify(
    age: float,
    review_count: int,
    comment_count: int,
    time_unit: TimeUnit | str = TimeUnit.DAYS,
    policy: str = DEFAULT_POLICY,
) -> PRStatus:
    return get_policy(policy).classify(age, review_count, comment_count, time_unit)
