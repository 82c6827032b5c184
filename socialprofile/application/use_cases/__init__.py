"""Aggregate application use cases."""

from .activity_feed import (
    ActivityAggregator,
    group_feed_entries,
    mark_boundary,
    sort_activity,
)
from .profile import ProfileService
from .relationships import RelationshipCache, invalidate_owner_relationships
from .visibility import ItemGate, VisibilityFilter

__all__ = [
    "ActivityAggregator",
    "ItemGate",
    "ProfileService",
    "RelationshipCache",
    "VisibilityFilter",
    "group_feed_entries",
    "invalidate_owner_relationships",
    "mark_boundary",
    "sort_activity",
]
