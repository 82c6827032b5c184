"""Use cases for aggregating social activity into ordered, grouped feeds."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import replace
from datetime import datetime

from socialprofile.domain.entities import (
    ActivityFeed,
    ActivityFilters,
    ActivityItem,
    ActivityType,
    FeedConfig,
    FeedEntry,
    FeedState,
    RelationshipType,
)
from socialprofile.domain.errors import InvalidFilter, SourceUnavailable
from socialprofile.domain.interfaces import ActivityStore

from .relationships import RelationshipCache
from .visibility import ItemGate

logger = logging.getLogger(__name__)


def sort_activity(items: Iterable[ActivityItem]) -> list[ActivityItem]:
    """Return ``items`` newest first; equal timestamps keep their input order."""

    return sorted(items, key=lambda item: item.timestamp, reverse=True)


def _continues(previous: FeedEntry, current: FeedEntry) -> bool:
    return (
        previous.item.group_key == current.item.group_key
        and current.position == previous.position + 1
    )


def group_feed_entries(entries: Sequence[FeedEntry]) -> tuple[FeedEntry, ...]:
    """Mark where runs of groupable entries start and end.

    An entry continues the group of the one before it when both share type and
    actor and nothing was filtered out between them. The pass only reads
    ``position`` and the items, so running it again yields the same markers.
    """

    grouped: list[FeedEntry] = []
    last_index = len(entries) - 1
    for index, entry in enumerate(entries):
        joins_previous = index > 0 and _continues(entries[index - 1], entry)
        continues_next = index < last_index and _continues(entry, entries[index + 1])
        grouped.append(
            replace(
                entry,
                first_in_group=not joins_previous,
                last_in_group=not continues_next,
            )
        )
    return tuple(grouped)


def mark_boundary(entries: Sequence[FeedEntry], limit: int) -> tuple[FeedEntry, ...]:
    """Flag the last entry rendered before the ``limit`` cutoff."""

    boundary = min(limit, len(entries)) - 1
    return tuple(
        replace(entry, is_boundary=index == boundary) for index, entry in enumerate(entries)
    )


def validate_limit(limit: object, *, name: str = "limit") -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        msg = f"{name} must be a positive integer, got {limit!r}"
        raise InvalidFilter(msg)
    return limit


class _FeedRequest:
    """Track the lifecycle of one feed build for logging."""

    def __init__(self, owner_id: int, kind: str) -> None:
        self.owner_id = owner_id
        self.kind = kind
        self.state = FeedState.REQUESTED

    def advance(self, state: FeedState) -> None:
        logger.debug(
            "%s feed for actor %s: %s -> %s",
            self.kind,
            self.owner_id,
            self.state.value,
            state.value,
        )
        self.state = state


class ActivityAggregator:
    """Merge raw events into the feeds shown on profile and activity pages."""

    def __init__(
        self,
        store: ActivityStore,
        *,
        config: FeedConfig | None = None,
        relationships: RelationshipCache | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._store = store
        self._config = config or FeedConfig()
        self._relationships = relationships
        self._clock = clock

    @property
    def config(self) -> FeedConfig:
        return self._config

    def build_feed(
        self,
        owner_id: int,
        filters: ActivityFilters | None = None,
        limit: int | None = None,
        *,
        gate: ItemGate | None = None,
        since: datetime | None = None,
        deadline: float | None = None,
    ) -> ActivityFeed:
        """Return the recent activity of ``owner_id`` capped at ``limit`` items.

        ``gate`` removes items the viewer may not see; removed items still count
        toward ``total_count``. ``deadline`` is a :func:`time.monotonic` value
        after which the store is considered unavailable.
        """

        limit = validate_limit(self._config.display_limit if limit is None else limit)
        activity_types = (filters or ActivityFilters()).resolve_types()
        return self._build(
            _FeedRequest(owner_id, "profile"),
            actor_ids=[owner_id],
            activity_types=activity_types,
            limit=limit,
            gate=gate,
            since=since,
            deadline=deadline,
        )

    def build_network_feed(
        self,
        owner_id: int,
        filters: ActivityFilters | None = None,
        *,
        rel_type: RelationshipType = RelationshipType.FRIEND,
        gate: ItemGate | None = None,
        since: datetime | None = None,
        deadline: float | None = None,
    ) -> ActivityFeed:
        """Return the activity of the people ``owner_id`` has relationships with.

        The feed is capped at the configured ``hard_cap`` rather than the
        profile ``display_limit``.
        """

        if self._relationships is None:
            raise RuntimeError("A relationship cache is required to build network feeds")

        limit = validate_limit(self._config.hard_cap, name="hard_cap")
        activity_types = (filters or ActivityFilters()).resolve_types()
        request = _FeedRequest(owner_id, "network")
        deadline = self._effective_deadline(deadline)

        lookup = self._relationships.lookup(
            owner_id,
            rel_type,
            self._config.network_friend_count,
            timeout=self._remaining(deadline),
        )
        if lookup.source_unavailable:
            request.advance(FeedState.FAILED)
            return ActivityFeed.unavailable(
                owner_id,
                limit,
                error="relationship graph is unavailable",
                activity_types=activity_types,
            )

        actor_ids = [record.actor_id for record in lookup.records]
        if not actor_ids:
            for state in (
                FeedState.FILTERED,
                FeedState.AGGREGATED,
                FeedState.CAPPED,
                FeedState.DELIVERED,
            ):
                request.advance(state)
            return ActivityFeed(
                owner_id=owner_id,
                entries=(),
                limit=limit,
                total_count=0,
                activity_types=activity_types,
            )

        return self._build(
            request,
            actor_ids=actor_ids,
            activity_types=activity_types,
            limit=limit,
            gate=gate,
            since=since,
            deadline=deadline,
        )

    def _build(
        self,
        request: _FeedRequest,
        *,
        actor_ids: list[int],
        activity_types: frozenset[ActivityType],
        limit: int,
        gate: ItemGate | None,
        since: datetime | None,
        deadline: float | None,
    ) -> ActivityFeed:
        deadline = self._effective_deadline(deadline)
        try:
            raw = self._fetch(actor_ids, since, deadline)
        except (SourceUnavailable, TimeoutError, OSError) as exc:
            logger.warning(
                "Activity store unavailable for actor %s: %s", request.owner_id, exc
            )
            request.advance(FeedState.FAILED)
            return ActivityFeed.unavailable(
                request.owner_id,
                limit,
                error=str(exc),
                activity_types=activity_types,
            )

        # Positions come from the full sorted sequence so that groups never
        # bridge an item removed by the type filter or the visibility gate.
        ranked = sort_activity(raw)
        matching = [
            FeedEntry(item=item, position=position)
            for position, item in enumerate(ranked)
            if item.type in activity_types
        ]
        total_count = len(matching)
        visible = [entry for entry in matching if gate is None or gate(entry.item)]
        request.advance(FeedState.FILTERED)

        grouped = group_feed_entries(visible[:limit])
        request.advance(FeedState.AGGREGATED)

        entries = mark_boundary(grouped, limit)
        request.advance(FeedState.CAPPED)

        feed = ActivityFeed(
            owner_id=request.owner_id,
            entries=entries,
            limit=limit,
            total_count=total_count,
            activity_types=activity_types,
        )
        request.advance(FeedState.DELIVERED)
        return feed

    def _fetch(
        self,
        actor_ids: list[int],
        since: datetime | None,
        deadline: float | None,
    ) -> list[ActivityItem]:
        remaining = self._remaining(deadline)
        if remaining is not None and remaining <= 0:
            raise SourceUnavailable("activity store", "request deadline exceeded")

        items: list[ActivityItem] = []
        for item in self._store.query(actor_ids, since, timeout=remaining):
            if deadline is not None and self._clock() > deadline:
                raise SourceUnavailable("activity store", "request deadline exceeded")
            items.append(item)
        return items

    def _effective_deadline(self, deadline: float | None) -> float | None:
        timeout = self._config.source_timeout
        if timeout is None:
            return deadline
        own = self._clock() + timeout
        return own if deadline is None else min(deadline, own)

    def _remaining(self, deadline: float | None) -> float | None:
        if deadline is None:
            return None
        return deadline - self._clock()


__all__ = [
    "ActivityAggregator",
    "group_feed_entries",
    "mark_boundary",
    "sort_activity",
    "validate_limit",
]
