"""Domain entities for ordered, grouped and capped activity feeds."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from socialprofile.domain.errors import InvalidFilter

from .activity_item import DEFAULT_ACTIVITY_TYPES, ActivityItem, ActivityType

ITEM_TYPE_ALL: Final[str] = "all"
ITEM_TYPE_EDITS: Final[str] = "edits"
ITEM_TYPE_MESSAGES: Final[str] = "messages"


class FeedState(str, Enum):
    """Lifecycle of a single feed request."""

    REQUESTED = "requested"
    FILTERED = "filtered"
    AGGREGATED = "aggregated"
    CAPPED = "capped"
    DELIVERED = "delivered"
    FAILED = "failed"


@dataclass(frozen=True)
class ActivityFilters:
    """Type filters applied to a feed request.

    ``include_edits`` and ``include_messages_sent`` switch off edits and board
    messages individually; the remaining default types stay enabled. When
    ``item_types`` is given it is used verbatim and the flags may only agree with
    it.
    """

    include_edits: bool | None = None
    include_messages_sent: bool | None = None
    item_types: frozenset[ActivityType] | None = None

    @classmethod
    def from_item_type(cls, item_type: str | None) -> "ActivityFilters":
        """Build filters from the ``item_type`` request parameter."""

        value = (item_type or ITEM_TYPE_ALL).strip().lower()
        if value == ITEM_TYPE_ALL:
            return cls(include_edits=True, include_messages_sent=True)
        if value == ITEM_TYPE_EDITS:
            return cls(include_edits=True, include_messages_sent=False)
        if value == ITEM_TYPE_MESSAGES:
            return cls(include_edits=False, include_messages_sent=True)
        msg = f"Unknown item type filter {item_type!r}"
        raise InvalidFilter(msg)

    def resolve_types(self) -> frozenset[ActivityType]:
        """Return the activity types selected by these filters."""

        if self.item_types is not None:
            selected = frozenset(ActivityType(value) for value in self.item_types)
            self._check_flag(self.include_edits, ActivityType.EDIT, selected, "include_edits")
            self._check_flag(
                self.include_messages_sent,
                ActivityType.USER_MESSAGE,
                selected,
                "include_messages_sent",
            )
        else:
            selected = set(DEFAULT_ACTIVITY_TYPES)
            if self.include_edits is False:
                selected.discard(ActivityType.EDIT)
            if self.include_messages_sent is False:
                selected.discard(ActivityType.USER_MESSAGE)
            selected = frozenset(selected)

        if not selected:
            raise InvalidFilter("The filters exclude every activity type")
        return selected

    @staticmethod
    def _check_flag(
        flag: bool | None,
        activity_type: ActivityType,
        selected: frozenset[ActivityType],
        name: str,
    ) -> None:
        if flag is None:
            return
        if flag != (activity_type in selected):
            msg = f"{name}={flag} contradicts the explicit item types"
            raise InvalidFilter(msg)


@dataclass(frozen=True)
class FeedConfig:
    """Window sizes and time budget used when building feeds."""

    display_limit: int = 8
    hard_cap: int = 40
    network_friend_count: int = 50
    source_timeout: float | None = 5.0


@dataclass(frozen=True)
class FeedEntry:
    """An item placed in a feed together with its grouping metadata.

    ``position`` is the item's index in the sorted, unfiltered sequence fetched
    from the store. Two entries are only adjacent when their positions are
    consecutive.
    """

    item: ActivityItem
    position: int
    first_in_group: bool = True
    last_in_group: bool = True
    is_boundary: bool = False


@dataclass(frozen=True)
class ActivityFeed:
    """Ordered, filtered and capped activity handed to the presenter."""

    owner_id: int
    entries: tuple[FeedEntry, ...]
    limit: int
    total_count: int
    state: FeedState = FeedState.DELIVERED
    source_unavailable: bool = False
    error: str | None = None
    activity_types: frozenset[ActivityType] = field(default_factory=frozenset)

    @property
    def items(self) -> list[ActivityItem]:
        return [entry.item for entry in self.entries]

    @property
    def displayed_count(self) -> int:
        return len(self.entries)

    @property
    def style_boundary(self) -> int:
        """Number of entries up to and including the one with final styling."""

        return min(self.limit, len(self.entries))

    @property
    def has_more(self) -> bool:
        """Return ``True`` when more matching activity exists than is displayed."""

        return self.total_count > self.displayed_count

    @classmethod
    def unavailable(
        cls,
        owner_id: int,
        limit: int,
        *,
        error: str | None = None,
        activity_types: frozenset[ActivityType] = frozenset(),
    ) -> "ActivityFeed":
        """Return an empty feed signalling that the activity store failed."""

        return cls(
            owner_id=owner_id,
            entries=(),
            limit=limit,
            total_count=0,
            state=FeedState.FAILED,
            source_unavailable=True,
            error=error,
            activity_types=activity_types,
        )


__all__ = [
    "ActivityFeed",
    "ActivityFilters",
    "FeedConfig",
    "FeedEntry",
    "FeedState",
    "ITEM_TYPE_ALL",
    "ITEM_TYPE_EDITS",
    "ITEM_TYPE_MESSAGES",
]
