"""Remember each player's rescue counters between syncs.

Storage is a collaborator: anything with ``load``/``save`` keyed by username
works. A JSON file store is provided for the CLI.
"""
from __future__ import annotations

import dataclasses
import json
from datetime import datetime
from pathlib import Path
from typing import Protocol

from .errors import SnapshotError
from .models import ActivityDelta, ActivitySnapshot, RescuerStats

COUNTERS = (
    "critical_rescues",
    "urgent_rescues",
    "warning_rescues",
    "approvals",
    "changes_requested",
    "comments",
)

_PHRASES = {
    "critical_rescues": ("critical rescue", "critical rescues"),
    "urgent_rescues": ("urgent rescue", "urgent rescues"),
    "warning_rescues": ("warning rescue", "warning rescues"),
    "approvals": ("approval", "approvals"),
    "changes_requested": ("change request", "change requests"),
    "comments": ("comment", "comments"),
}


class SnapshotStore(Protocol):
    def load(self, username: str) -> ActivitySnapshot | None: ...

    def save(self, snapshot: ActivitySnapshot) -> None: ...


class MemorySnapshotStore:
    def __init__(self) -> None:
        self._snapshots: dict[str, ActivitySnapshot] = {}

    def load(self, username: str) -> ActivitySnapshot | None:
        return self._snapshots.get(username)

    def save(self, snapshot: ActivitySnapshot) -> None:
        self._snapshots[snapshot.username] = snapshot


class JsonFileSnapshotStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            snapshots = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise SnapshotError(f"Could not read snapshot file {self.path}: {exc}") from exc
        if not isinstance(snapshots, dict):
            raise SnapshotError(f"Snapshot file {self.path} does not hold a JSON object.")
        return snapshots

    def load(self, username: str) -> ActivitySnapshot | None:
        raw = self._read().get(username)
        if raw is None:
            return None
        try:
            return ActivitySnapshot(**{**raw, "last_checked": datetime.fromisoformat(raw["last_checked"])})
        except (KeyError, TypeError, ValueError) as exc:
            raise SnapshotError(f"Snapshot for {username} in {self.path} is malformed: {exc!r}") from exc

    def save(self, snapshot: ActivitySnapshot) -> None:
        snapshots = self._read()
        raw = dataclasses.asdict(snapshot)
        raw["last_checked"] = snapshot.last_checked.isoformat()
        snapshots[snapshot.username] = raw
        try:
            self.path.write_text(json.dumps(snapshots, indent=2), encoding="utf-8")
        except OSError as exc:
            raise SnapshotError(f"Could not write snapshot file {self.path}: {exc}") from exc


def snapshot_from_stats(stats: RescuerStats, now: datetime) -> ActivitySnapshot:
    return ActivitySnapshot(
        username=stats.username,
        rescue_count=stats.rescue_count,
        critical_rescues=stats.critical_rescues,
        urgent_rescues=stats.urgent_rescues,
        warning_rescues=stats.warning_rescues,
        approvals=stats.approvals,
        changes_requested=stats.changes_requested,
        comments=stats.comments,
        last_checked=now,
    )


def new_activity(previous: ActivitySnapshot | None, current: ActivitySnapshot) -> ActivityDelta:
    """Counters gained since ``previous``. Decreases count as zero."""
    if previous is None:
        counts = {name: getattr(current, name) for name in COUNTERS}
    else:
        counts = {name: max(0, getattr(current, name) - getattr(previous, name)) for name in COUNTERS}
    return ActivityDelta(username=current.username, first_sync=previous is None, counts=counts)


def describe(delta: ActivityDelta) -> list[str]:
    phrases = []
    for name in COUNTERS:
        count = delta.counts.get(name, 0)
        if count:
            singular, plural = _PHRASES[name]
            phrases.append(f"{count} {singular if count == 1 else plural}")
    return phrases


def sync_activity(store: SnapshotStore, stats: RescuerStats, now: datetime) -> ActivityDelta:
    current = snapshot_from_stats(stats, now)
    delta = new_activity(store.load(stats.username), current)
    store.save(current)
    return delta
