from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ReviewState(str, Enum):
    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    COMMENTED = "COMMENTED"

    @classmethod
    def parse(cls, value: str | None) -> "ReviewState":
        # DISMISSED, PENDING and anything GitHub adds later count as a comment.
        try:
            return cls(value)
        except ValueError:
            return cls.COMMENTED

    @property
    def is_formal(self) -> bool:
        return self is not ReviewState.COMMENTED


class TimeUnit(str, Enum):
    HOURS = "hours"
    DAYS = "days"

    @property
    def seconds(self) -> int:
        return 3600 if self is TimeUnit.HOURS else 86400

    @property
    def suffix(self) -> str:
        return "h" if self is TimeUnit.HOURS else "d"


class Urgency(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    URGENT = "urgent"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _URGENCY_RANK[self]


_URGENCY_RANK = {
    Urgency.NORMAL: 1,
    Urgency.WARNING: 2,
    Urgency.URGENT: 3,
    Urgency.CRITICAL: 4,
}


@dataclass(frozen=True)
class ReviewEvent:
    actor: str
    state: ReviewState
    submitted_at: datetime


@dataclass(frozen=True)
class CommentEvent:
    actor: str
    posted_at: datetime


@dataclass(frozen=True)
class ReactionEvent:
    actor: str
    content: str
    reacted_at: datetime


@dataclass(frozen=True)
class PullRequestTimeline:
    number: int
    title: str
    url: str
    created_at: datetime
    review_events: tuple[ReviewEvent, ...] = ()
    comment_events: tuple[CommentEvent, ...] = ()
    reaction_events: tuple[ReactionEvent, ...] = ()


@dataclass
class ReviewerStats:
    username: str
    review_count: int = 0
    approvals: int = 0
    changes_requested: int = 0
    review_comments: int = 0
    plain_comments: int = 0
    reaction_count: int = 0
    points: int = 0


@dataclass
class RescuerStats:
    username: str
    rescue_count: int = 0
    critical_rescues: int = 0
    urgent_rescues: int = 0
    warning_rescues: int = 0
    approvals: int = 0
    changes_requested: int = 0
    comments: int = 0
    points: int = 0


@dataclass(frozen=True)
class PRStatus:
    urgency: Urgency
    message: str
    color: int
    emoji: str


@dataclass(frozen=True)
class PRWithStatus:
    number: int
    title: str
    url: str
    created_at: datetime
    review_count: int
    comment_count: int
    age: int
    time_unit: TimeUnit
    status: PRStatus


@dataclass(frozen=True)
class ActivitySnapshot:
    username: str
    rescue_count: int
    critical_rescues: int
    urgent_rescues: int
    warning_rescues: int
    approvals: int
    changes_requested: int
    comments: int
    last_checked: datetime


@dataclass(frozen=True)
class ActivityDelta:
    username: str
    first_sync: bool
    counts: dict[str, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return sum(self.counts.values())
