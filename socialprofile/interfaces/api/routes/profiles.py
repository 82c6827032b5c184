"""Endpoints exposing profile overviews, activity feeds and relationship lists."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from socialprofile.application.use_cases import (
    ActivityAggregator,
    ProfileService,
    RelationshipCache,
    VisibilityFilter,
)
from socialprofile.config import get_settings
from socialprofile.domain.entities import (
    ActivityFeed,
    ActivityFilters,
    ProfileOverview,
    RelationshipType,
    Viewer,
)
from socialprofile.domain.errors import InvalidFilter
from socialprofile.interfaces.api.dependencies import (
    get_activity_aggregator,
    get_profile_service,
    get_relationship_cache,
    get_viewer,
    get_visibility_filter,
)
from socialprofile.interfaces.api.schemas import (
    ActivityFeedRead,
    BoardSummaryRead,
    ProfileOverviewRead,
    ProfileSectionsRead,
    RelationshipListRead,
    RelationshipRecordRead,
    RelationshipSectionRead,
    SectionRead,
    UserStatsRead,
    VisibleFieldsRead,
)

router = APIRouter(prefix="/profiles", tags=["profiles"])


def _bad_request(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _parse_filters(item_type: str | None) -> ActivityFilters:
    try:
        return ActivityFilters.from_item_type(item_type)
    except InvalidFilter as exc:
        raise _bad_request(exc) from exc


def _feed_to_schema(feed: ActivityFeed) -> ActivityFeedRead:
    return ActivityFeedRead.model_validate(feed, from_attributes=True)


def _overview_to_schema(overview: ProfileOverview) -> ProfileOverviewRead:
    sections = overview.sections
    return ProfileOverviewRead(
        owner_id=overview.owner_id,
        viewer_id=overview.viewer.actor_id,
        is_owner=overview.is_owner,
        visible_fields=dict(overview.visible_fields),
        sections=ProfileSectionsRead(
            friends=SectionRead[RelationshipSectionRead].model_validate(
                sections["friends"], from_attributes=True
            ),
            foes=SectionRead[RelationshipSectionRead].model_validate(
                sections["foes"], from_attributes=True
            ),
            stats=SectionRead[UserStatsRead].model_validate(
                sections["stats"], from_attributes=True
            ),
            personal=SectionRead[list[str]].model_validate(
                sections["personal"], from_attributes=True
            ),
            interests=SectionRead[list[str]].model_validate(
                sections["interests"], from_attributes=True
            ),
            activity=SectionRead[ActivityFeedRead].model_validate(
                sections["activity"], from_attributes=True
            ),
            board=SectionRead[BoardSummaryRead].model_validate(
                sections["board"], from_attributes=True
            ),
        ),
    )


@router.get("/{owner_id}", response_model=ProfileOverviewRead)
def read_profile(
    owner_id: int,
    item_type: str | None = Query(None, description="all, edits or messages"),
    viewer: Viewer = Depends(get_viewer),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileOverviewRead:
    """Return every enabled section of the profile as seen by the viewer."""

    filters = _parse_filters(item_type)
    try:
        overview = service.build_overview(owner_id, viewer, filters=filters)
    except InvalidFilter as exc:
        raise _bad_request(exc) from exc
    return _overview_to_schema(overview)


@router.get("/{owner_id}/activity", response_model=ActivityFeedRead)
def read_activity(
    owner_id: int,
    item_type: str | None = Query(None, description="all, edits or messages"),
    limit: int | None = Query(None, description="Maximum number of items to return"),
    viewer: Viewer = Depends(get_viewer),
    aggregator: ActivityAggregator = Depends(get_activity_aggregator),
    visibility: VisibilityFilter = Depends(get_visibility_filter),
) -> ActivityFeedRead:
    """Return the recent activity of ``owner_id`` visible to the viewer."""

    filters = _parse_filters(item_type)
    try:
        feed = aggregator.build_feed(
            owner_id,
            filters,
            limit,
            gate=visibility.item_gate(owner_id, viewer),
        )
    except InvalidFilter as exc:
        raise _bad_request(exc) from exc
    return _feed_to_schema(feed)


@router.get("/{owner_id}/network-activity", response_model=ActivityFeedRead)
def read_network_activity(
    owner_id: int,
    item_type: str | None = Query(None, description="all, edits or messages"),
    rel_type: str | None = Query(None, description="friends or foes"),
    viewer: Viewer = Depends(get_viewer),
    aggregator: ActivityAggregator = Depends(get_activity_aggregator),
    visibility: VisibilityFilter = Depends(get_visibility_filter),
) -> ActivityFeedRead:
    """Return the recent activity of the owner's friends or foes."""

    filters = _parse_filters(item_type)
    kind = RelationshipType.FRIEND
    if rel_type is not None:
        try:
            kind = RelationshipType.from_slug(rel_type)
        except ValueError as exc:
            raise _bad_request(exc) from exc
    try:
        feed = aggregator.build_network_feed(
            owner_id,
            filters,
            rel_type=kind,
            gate=visibility.item_gate(owner_id, viewer),
        )
    except InvalidFilter as exc:
        raise _bad_request(exc) from exc
    return _feed_to_schema(feed)


@router.get("/{owner_id}/relationships/{rel_type}", response_model=RelationshipListRead)
def read_relationships(
    owner_id: int,
    rel_type: str,
    count: int | None = Query(None, description="Number of relationships to return"),
    viewer: Viewer = Depends(get_viewer),
    relationships: RelationshipCache = Depends(get_relationship_cache),
    visibility: VisibilityFilter = Depends(get_visibility_filter),
) -> RelationshipListRead:
    """Return the most recent friends or foes of ``owner_id``."""

    try:
        kind = RelationshipType.from_slug(rel_type)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    visible_fields = visibility.compute_visible_fields(owner_id, viewer)
    if not visible_fields.is_visible(kind.slug):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"The {kind.slug} of this profile are not visible",
        )

    requested = get_settings().relationship_profile_count if count is None else count
    try:
        lookup = relationships.lookup(owner_id, kind, requested)
    except InvalidFilter as exc:
        raise _bad_request(exc) from exc

    return RelationshipListRead(
        owner_id=owner_id,
        rel_type=kind.slug,
        count=requested,
        records=[
            RelationshipRecordRead.model_validate(record, from_attributes=True)
            for record in lookup.records
        ],
        from_cache=lookup.from_cache,
        source_unavailable=lookup.source_unavailable,
    )


@router.get("/{owner_id}/visible-fields", response_model=VisibleFieldsRead)
def read_visible_fields(
    owner_id: int,
    viewer: Viewer = Depends(get_viewer),
    visibility: VisibilityFilter = Depends(get_visibility_filter),
) -> VisibleFieldsRead:
    """Return which profile fields of ``owner_id`` the viewer may see."""

    visible_fields = visibility.compute_visible_fields(owner_id, viewer)
    return VisibleFieldsRead(
        owner_id=owner_id,
        viewer_id=visible_fields.viewer_id,
        fields=dict(visible_fields),
    )


__all__ = ["router"]
