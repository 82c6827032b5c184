"""Domain entities exposed by the application."""

from .activity_feed import (
    ITEM_TYPE_ALL,
    ITEM_TYPE_EDITS,
    ITEM_TYPE_MESSAGES,
    ActivityFeed,
    ActivityFilters,
    FeedConfig,
    FeedEntry,
    FeedState,
)
from .activity_item import DEFAULT_ACTIVITY_TYPES, ActivityItem, ActivityType, TargetRef
from .profile import (
    PERMISSION_BOARD_DELETE,
    BoardSummary,
    ProfileDisplayConfig,
    ProfileOverview,
    RelationshipSection,
    SectionResult,
    UserStats,
    Viewer,
)
from .relationship import RelationshipLookup, RelationshipRecord, RelationshipType
from .visibility import (
    ALWAYS_PUBLIC_FIELDS,
    FIELD_ABOUT,
    FIELD_BOARD_PRIVATE,
    FIELD_FOES,
    FIELD_FRIENDS,
    FIELD_REAL_NAME,
    INTEREST_FIELDS,
    OWNER_ONLY_FIELDS,
    PERSONAL_FIELDS,
    PROFILE_FIELDS,
    SOCIAL_FIELDS,
    VisibilityRule,
    VisibleFieldSet,
)

__all__ = [
    "ActivityFeed",
    "ActivityFilters",
    "ActivityItem",
    "ActivityType",
    "ALWAYS_PUBLIC_FIELDS",
    "BoardSummary",
    "DEFAULT_ACTIVITY_TYPES",
    "FeedConfig",
    "FeedEntry",
    "FeedState",
    "FIELD_ABOUT",
    "FIELD_BOARD_PRIVATE",
    "FIELD_FOES",
    "FIELD_FRIENDS",
    "FIELD_REAL_NAME",
    "INTEREST_FIELDS",
    "ITEM_TYPE_ALL",
    "ITEM_TYPE_EDITS",
    "ITEM_TYPE_MESSAGES",
    "OWNER_ONLY_FIELDS",
    "PERMISSION_BOARD_DELETE",
    "PERSONAL_FIELDS",
    "PROFILE_FIELDS",
    "ProfileDisplayConfig",
    "ProfileOverview",
    "RelationshipLookup",
    "RelationshipRecord",
    "RelationshipSection",
    "RelationshipType",
    "SectionResult",
    "SOCIAL_FIELDS",
    "TargetRef",
    "UserStats",
    "Viewer",
    "VisibilityRule",
    "VisibleFieldSet",
]
