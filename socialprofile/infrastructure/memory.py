"""In-memory collaborators for embedding the core and for tests."""

from __future__ import annotations

import itertools
import threading
from collections.abc import Iterable, Iterator, Mapping
from datetime import datetime

from socialprofile.domain.entities import (
    ActivityItem,
    RelationshipRecord,
    RelationshipType,
    UserStats,
    VisibilityRule,
)
from socialprofile.domain.errors import SourceUnavailable
from socialprofile.domain.interfaces import (
    ActivityStore,
    ChangeListener,
    PrivacySettings,
    RelationshipGraph,
    StatsProvider,
)
from socialprofile.utils import now_in_app_timezone


class InMemoryActivityStore(ActivityStore):
    """Activity log kept in a list, returned in insertion order."""

    def __init__(self, items: Iterable[ActivityItem] = ()) -> None:
        self._items: list[ActivityItem] = list(items)
        self.available = True

    def add(self, *items: ActivityItem) -> None:
        self._items.extend(items)

    def query(
        self,
        actor_ids: Iterable[int],
        since: datetime | None = None,
        *,
        timeout: float | None = None,
    ) -> Iterator[ActivityItem]:
        if not self.available:
            raise SourceUnavailable("activity store", "marked unavailable")
        wanted = set(actor_ids)
        snapshot = list(self._items)
        return (
            item
            for item in snapshot
            if item.actor_id in wanted and (since is None or item.timestamp > since)
        )


class InMemoryRelationshipGraph(RelationshipGraph):
    """Symmetric relationship graph with change notifications."""

    def __init__(self) -> None:
        self._edges: dict[int, dict[int, tuple[RelationshipType, datetime, int]]] = {}
        self._listeners: list[ChangeListener] = []
        self._lock = threading.RLock()
        self._sequence = itertools.count()
        self.available = True

    def add(
        self,
        owner_id: int,
        other_id: int,
        rel_type: RelationshipType = RelationshipType.FRIEND,
        established_at: datetime | None = None,
    ) -> None:
        """Create or replace the relationship between the two actors."""

        if owner_id == other_id:
            raise ValueError("An actor cannot have a relationship with itself")
        established_at = established_at or now_in_app_timezone()
        rel_type = RelationshipType(rel_type)
        with self._lock:
            sequence = next(self._sequence)
            self._edges.setdefault(owner_id, {})[other_id] = (rel_type, established_at, sequence)
            self._edges.setdefault(other_id, {})[owner_id] = (rel_type, established_at, sequence)
        self._notify(owner_id, other_id)

    def remove(self, owner_id: int, other_id: int) -> None:
        with self._lock:
            removed = self._edges.get(owner_id, {}).pop(other_id, None)
            self._edges.get(other_id, {}).pop(owner_id, None)
        if removed is not None:
            self._notify(owner_id, other_id)

    def list(
        self,
        owner_id: int,
        rel_type: RelationshipType,
        count: int,
        *,
        timeout: float | None = None,
    ) -> list[RelationshipRecord]:
        self._check_available()
        with self._lock:
            edges = [
                (established_at, sequence, other_id)
                for other_id, (kind, established_at, sequence) in self._edges.get(
                    owner_id, {}
                ).items()
                if kind == rel_type
            ]
        edges.sort(reverse=True)
        return [
            RelationshipRecord(actor_id=other_id, established_at=established_at)
            for established_at, _, other_id in edges[:count]
        ]

    def relationship_between(
        self, owner_id: int, other_id: int, *, timeout: float | None = None
    ) -> RelationshipType | None:
        self._check_available()
        with self._lock:
            edge = self._edges.get(owner_id, {}).get(other_id)
        return edge[0] if edge is not None else None

    def on_change(self, listener: ChangeListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def _check_available(self) -> None:
        if not self.available:
            raise SourceUnavailable("relationship graph", "marked unavailable")

    def _notify(self, *owner_ids: int) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for owner_id in owner_ids:
            for listener in listeners:
                listener(owner_id)


class InMemoryPrivacySettings(PrivacySettings):
    """Explicit field rules per owner."""

    def __init__(self, rules: Mapping[int, Mapping[str, VisibilityRule | str]] | None = None) -> None:
        self._rules: dict[int, dict[str, VisibilityRule | str]] = {
            owner_id: dict(fields) for owner_id, fields in (rules or {}).items()
        }
        self.available = True

    def set_rule(self, owner_id: int, field_name: str, rule: VisibilityRule | str) -> None:
        self._rules.setdefault(owner_id, {})[field_name] = rule

    def get(self, owner_id: int) -> Mapping[str, VisibilityRule]:
        if not self.available:
            raise SourceUnavailable("privacy settings", "marked unavailable")
        return dict(self._rules.get(owner_id, {}))


class InMemoryStatsProvider(StatsProvider):
    def __init__(self, stats: Mapping[int, UserStats] | None = None) -> None:
        self._stats: dict[int, UserStats] = dict(stats or {})

    def set(self, owner_id: int, stats: UserStats) -> None:
        self._stats[owner_id] = stats

    def get(self, owner_id: int) -> UserStats:
        return self._stats.get(owner_id, UserStats())


__all__ = [
    "InMemoryActivityStore",
    "InMemoryPrivacySettings",
    "InMemoryRelationshipGraph",
    "InMemoryStatsProvider",
]
