from __future__ import annotations

import pytest

from conftest import at
from socialprofile.application.use_cases import (
    ActivityAggregator,
    ProfileService,
    RelationshipCache,
    VisibilityFilter,
)
from socialprofile.domain.entities import (
    PERMISSION_BOARD_DELETE,
    ActivityFilters,
    ActivityItem,
    ActivityType,
    BoardSummary,
    ProfileDisplayConfig,
    UserStats,
    Viewer,
    VisibilityRule,
)
from socialprofile.domain.errors import InvalidFilter
from socialprofile.domain.interfaces import ActivityStore, StatsProvider
from socialprofile.infrastructure.cache import InMemoryCacheBackend
from socialprofile.infrastructure.memory import (
    InMemoryActivityStore,
    InMemoryPrivacySettings,
    InMemoryRelationshipGraph,
    InMemoryStatsProvider,
)

OWNER = 1


class _BrokenStats(StatsProvider):
    def get(self, owner_id: int) -> UserStats:
        raise RuntimeError("stats backend exploded")


class _BrokenStore(ActivityStore):
    def query(self, actor_ids, since=None, *, timeout=None):
        raise RuntimeError("unexpected store failure")


def _service(
    *,
    store: ActivityStore | None = None,
    stats: StatsProvider | None = None,
    privacy: InMemoryPrivacySettings | None = None,
    display: ProfileDisplayConfig | None = None,
    friends: int = 5,
) -> ProfileService:
    graph = InMemoryRelationshipGraph()
    for index in range(friends):
        graph.add(OWNER, 10 + index, established_at=at(index))
    relationships = RelationshipCache(InMemoryCacheBackend(), graph)
    relationships.attach()
    if store is None:
        store = InMemoryActivityStore(
            [ActivityItem(type=ActivityType.EDIT, actor_id=OWNER, timestamp=at(m)) for m in range(12)]
        )
    return ProfileService(
        aggregator=ActivityAggregator(store, relationships=relationships),
        relationships=relationships,
        visibility=VisibilityFilter(privacy or InMemoryPrivacySettings(), graph),
        stats=stats
        or InMemoryStatsProvider(
            {OWNER: UserStats(edits=12, friend_count=friends, board_public=7, board_private=5)}
        ),
        display=display,
    )


def test_overview_contains_every_section() -> None:
    overview = _service().build_overview(OWNER, Viewer(actor_id=2))

    friends = overview.sections["friends"]
    assert friends.available
    assert [record.actor_id for record in friends.data.records] == [14, 13, 12, 11]
    assert friends.data.total_count == 5
    assert friends.data.view_all is True

    assert overview.sections["foes"].enabled is False
    assert overview.sections["stats"].data.edits == 12
    assert overview.activity.displayed_count == 8
    assert overview.activity.total_count == 12
    assert overview.is_owner is False


def test_view_all_link_hidden_when_everything_fits() -> None:
    overview = _service(friends=3).build_overview(OWNER, Viewer(actor_id=2))

    assert overview.sections["friends"].data.view_all is False


def test_stats_section_is_empty_without_edits() -> None:
    service = _service(stats=InMemoryStatsProvider({OWNER: UserStats(edits=0)}))

    assert service.build_overview(OWNER, Viewer.anonymous()).sections["stats"].data is None


def test_anonymous_personal_section_lists_public_fields_only() -> None:
    overview = _service().build_overview(OWNER, Viewer.anonymous())

    assert set(overview.sections["personal"].data) == {"location_state", "websites", "about"}
    assert overview.sections["interests"].data == []


def test_friends_section_empty_when_field_hidden() -> None:
    privacy = InMemoryPrivacySettings({OWNER: {"friends": VisibilityRule.HIDDEN}})

    overview = _service(privacy=privacy).build_overview(OWNER, Viewer(actor_id=2))

    assert overview.sections["friends"].available
    assert overview.sections["friends"].data is None


@pytest.mark.parametrize(
    ("viewer", "expected_total"),
    [
        (Viewer(actor_id=OWNER), 12),
        (Viewer(actor_id=2), 7),
        (Viewer(actor_id=3, permissions=frozenset({PERMISSION_BOARD_DELETE})), 12),
        (Viewer.anonymous(), 7),
    ],
)
def test_board_counts_private_messages_for_owner_and_moderators(viewer, expected_total) -> None:
    board = _service().build_overview(OWNER, viewer).sections["board"].data

    assert board == BoardSummary(
        total=expected_total,
        displayed=min(expected_total, 10),
        view_all=expected_total > 10,
    )


def test_failing_stats_only_break_dependent_sections(caplog) -> None:
    overview = _service(stats=_BrokenStats()).build_overview(OWNER, Viewer(actor_id=2))

    assert overview.sections["stats"].failed is True
    assert overview.sections["board"].failed is True
    assert overview.sections["friends"].available
    assert overview.sections["friends"].data.total_count == 4
    assert overview.activity is not None
    assert "Profile section stats failed" in caplog.text


def test_unexpected_store_error_fails_only_activity() -> None:
    overview = _service(store=_BrokenStore()).build_overview(OWNER, Viewer(actor_id=2))

    assert overview.sections["activity"].failed is True
    assert overview.activity is None
    assert overview.sections["friends"].available
    assert overview.sections["board"].available


def test_unavailable_store_is_reported_inside_the_section() -> None:
    store = InMemoryActivityStore()
    store.available = False

    overview = _service(store=store).build_overview(OWNER, Viewer(actor_id=2))

    assert overview.sections["activity"].failed is False
    assert overview.activity.source_unavailable is True


def test_disabled_sections_are_not_built() -> None:
    display = ProfileDisplayConfig(activity=False, board=False, foes=True)

    overview = _service(display=display, stats=_BrokenStats()).build_overview(
        OWNER, Viewer(actor_id=2)
    )

    assert overview.sections["activity"].enabled is False
    assert overview.sections["board"].enabled is False
    assert overview.sections["board"].failed is False
    assert overview.sections["foes"].enabled is True


def test_invalid_filters_fail_the_whole_request() -> None:
    with pytest.raises(InvalidFilter):
        _service().build_overview(
            OWNER, Viewer.anonymous(), filters=ActivityFilters(item_types=frozenset())
        )
