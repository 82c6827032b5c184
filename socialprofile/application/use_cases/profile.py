"""Use case assembling the data shown on a user's social profile page."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from socialprofile.domain.entities import (
    FIELD_FOES,
    FIELD_FRIENDS,
    INTEREST_FIELDS,
    PERMISSION_BOARD_DELETE,
    PERSONAL_FIELDS,
    ActivityFilters,
    BoardSummary,
    ProfileDisplayConfig,
    ProfileOverview,
    RelationshipSection,
    RelationshipType,
    SectionResult,
    UserStats,
    Viewer,
    VisibleFieldSet,
)
from socialprofile.domain.interfaces import StatsProvider

from .activity_feed import ActivityAggregator
from .relationships import RelationshipCache
from .visibility import VisibilityFilter

logger = logging.getLogger(__name__)

SECTION_FRIENDS = "friends"
SECTION_FOES = "foes"
SECTION_STATS = "stats"
SECTION_PERSONAL = "personal"
SECTION_INTERESTS = "interests"
SECTION_ACTIVITY = "activity"
SECTION_BOARD = "board"


class ProfileService:
    """Build a :class:`ProfileOverview`, isolating failures per section."""

    def __init__(
        self,
        *,
        aggregator: ActivityAggregator,
        relationships: RelationshipCache,
        visibility: VisibilityFilter,
        stats: StatsProvider,
        display: ProfileDisplayConfig | None = None,
    ) -> None:
        self._aggregator = aggregator
        self._relationships = relationships
        self._visibility = visibility
        self._stats = stats
        self._display = display or ProfileDisplayConfig()

    def build_overview(
        self,
        owner_id: int,
        viewer: Viewer,
        *,
        filters: ActivityFilters | None = None,
        deadline: float | None = None,
    ) -> ProfileOverview:
        """Return every enabled section of ``owner_id``'s profile for ``viewer``."""

        filters = filters or ActivityFilters()
        # Rejected here so a bad request fails as a whole instead of as an empty section.
        filters.resolve_types()

        display = self._display
        visible_fields = self._visibility.compute_visible_fields(owner_id, viewer)
        stats_cache: list[UserStats] = []

        def stats() -> UserStats:
            if not stats_cache:
                stats_cache.append(self._stats.get(owner_id))
            return stats_cache[0]

        builders: dict[str, tuple[bool, Callable[[], Any]]] = {
            SECTION_FRIENDS: (
                display.friends,
                lambda: self._relationship_section(
                    owner_id, RelationshipType.FRIEND, visible_fields, stats
                ),
            ),
            SECTION_FOES: (
                display.foes,
                lambda: self._relationship_section(
                    owner_id, RelationshipType.FOE, visible_fields, stats
                ),
            ),
            SECTION_STATS: (display.stats, lambda: _stats_section(stats())),
            SECTION_PERSONAL: (
                display.personal,
                lambda: visible_fields.visible(PERSONAL_FIELDS),
            ),
            SECTION_INTERESTS: (
                display.interests,
                lambda: visible_fields.visible(INTEREST_FIELDS),
            ),
            SECTION_ACTIVITY: (
                display.activity,
                lambda: self._aggregator.build_feed(
                    owner_id,
                    filters,
                    self._aggregator.config.display_limit,
                    gate=self._visibility.item_gate(owner_id, viewer, visible_fields),
                    deadline=deadline,
                ),
            ),
            SECTION_BOARD: (
                display.board,
                lambda: self._board_section(owner_id, viewer, stats()),
            ),
        }

        sections = {
            name: self._run_section(owner_id, name, enabled, builder)
            for name, (enabled, builder) in builders.items()
        }
        return ProfileOverview(
            owner_id=owner_id,
            viewer=viewer,
            is_owner=viewer.is_owner_of(owner_id),
            visible_fields=visible_fields,
            sections=sections,
        )

    def _run_section(
        self,
        owner_id: int,
        name: str,
        enabled: bool,
        builder: Callable[[], Any],
    ) -> SectionResult:
        if not enabled:
            return SectionResult(enabled=False)
        try:
            return SectionResult(data=builder())
        except Exception:
            logger.warning(
                "Profile section %s failed for actor %s", name, owner_id, exc_info=True
            )
            return SectionResult(failed=True)

    def _relationship_section(
        self,
        owner_id: int,
        rel_type: RelationshipType,
        visible_fields: VisibleFieldSet,
        stats: Callable[[], UserStats],
    ) -> RelationshipSection | None:
        field_name = FIELD_FRIENDS if rel_type is RelationshipType.FRIEND else FIELD_FOES
        if not visible_fields.is_visible(field_name):
            return None

        count = self._display.relationship_count
        lookup = self._relationships.lookup(owner_id, rel_type, count)
        try:
            counters = stats()
        except Exception:
            logger.warning(
                "Stats unavailable for actor %s; counting listed %s only",
                owner_id,
                rel_type.slug,
                exc_info=True,
            )
            total = len(lookup.records)
        else:
            total = (
                counters.friend_count
                if rel_type is RelationshipType.FRIEND
                else counters.foe_count
            )
            total = max(total, len(lookup.records))
        return RelationshipSection(
            records=lookup.records,
            total_count=total,
            view_all=total > count,
            source_unavailable=lookup.source_unavailable,
        )

    def _board_section(self, owner_id: int, viewer: Viewer, stats: UserStats) -> BoardSummary:
        total = stats.board_public
        if viewer.is_owner_of(owner_id) or viewer.has_permission(PERMISSION_BOARD_DELETE):
            total += stats.board_private
        limit = self._display.board_display_limit
        return BoardSummary(total=total, displayed=min(total, limit), view_all=total > limit)


def _stats_section(stats: UserStats) -> UserStats | None:
    # Nothing is shown until the user has at least one edit.
    if stats.edits == 0:
        return None
    return stats


__all__ = [
    "ProfileService",
    "SECTION_ACTIVITY",
    "SECTION_BOARD",
    "SECTION_FOES",
    "SECTION_FRIENDS",
    "SECTION_INTERESTS",
    "SECTION_PERSONAL",
    "SECTION_STATS",
]
