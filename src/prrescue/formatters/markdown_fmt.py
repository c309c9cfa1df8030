from __future__ import annotations

from datetime import datetime, timezone

from ..models import PRWithStatus, RescuerStats, ReviewerStats


def _header(title: str, owner_repo: str, count: int, noun: str) -> list[str]:
    now = datetime.now(tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    heading = f"{title}: {owner_repo}" if owner_repo else title
    return [f"# {heading}", f"> {count} {noun} · Generated: {now}", ""]


def format_reviewers(rows: list[ReviewerStats], owner_repo: str = "") -> str:
    lines = _header("Review Leaderboard", owner_repo, len(rows), "reviewers")
    if not rows:
        lines.append("_No review activity found._")
        return "\n".join(lines)

    lines.append("| # | Reviewer | Points | Reviews | Approvals | Changes Requested | Review Comments | Comments | Reactions |")
    lines.append("| --- | --- | --- | --- | --- | --- | --- | --- | --- |")
    for rank, s in enumerate(rows, start=1):
        lines.append(
            f"| {rank} | @{s.username} | {s.points} | {s.review_count} | {s.approvals} | "
            f"{s.changes_requested} | {s.review_comments} | {s.plain_comments} | {s.reaction_count} |"
        )
    return "\n".join(lines)


def format_rescuers(rows: list[RescuerStats], owner_repo: str = "") -> str:
    lines = _header("Rescue Leaderboard", owner_repo, len(rows), "rescuers")
    if not rows:
        lines.append("_No rescues found._")
        return "\n".join(lines)

    lines.append("| # | Rescuer | Points | Rescues | 🔥 Critical | 🟠 Urgent | 🟡 Warning | Approvals | Changes Requested | Comments |")
    lines.append("| --- | --- | --- | --- | --- | --- | --- | --- | --- | --- |")
    for rank, s in enumerate(rows, start=1):
        lines.append(
            f"| {rank} | @{s.username} | {s.points} | {s.rescue_count} | {s.critical_rescues} | "
            f"{s.urgent_rescues} | {s.warning_rescues} | {s.approvals} | {s.changes_requested} | {s.comments} |"
        )
    return "\n".join(lines)


def format_neglected(rows: list[PRWithStatus], owner_repo: str = "") -> str:
    lines = _header("Neglected Pull Requests", owner_repo, len(rows), "PRs")
    if not rows:
        lines.append("_No neglected PRs!_")
        return "\n".join(lines)

    for pr in rows:
        lines.append(f"## {pr.status.emoji} PR #{pr.number} — {pr.title}")
        lines.append("")
        lines.append("| Field | Value |")
        lines.append("| --- | --- |")
        lines.append(f"| Urgency | {pr.status.urgency.value} |")
        lines.append(f"| Status | {pr.status.message} |")
        lines.append(f"| Age | {pr.age}{pr.time_unit.suffix} |")
        lines.append(f"| Reviews | {pr.review_count} |")
        lines.append(f"| Comments | {pr.comment_count} |")
        lines.append(f"| URL | {pr.url} |")
        lines.append("")
    return "\n".join(lines)
