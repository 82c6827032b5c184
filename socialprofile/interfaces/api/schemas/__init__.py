from .activity import ActivityFeedRead, ActivityItemRead, FeedEntryRead, TargetRead
from .profile import (
    BoardSummaryRead,
    ProfileOverviewRead,
    ProfileSectionsRead,
    RelationshipSectionRead,
    SectionRead,
    UserStatsRead,
    VisibleFieldsRead,
)
from .relationship import RelationshipListRead, RelationshipRecordRead

__all__ = [
    "ActivityFeedRead",
    "ActivityItemRead",
    "BoardSummaryRead",
    "FeedEntryRead",
    "ProfileOverviewRead",
    "ProfileSectionsRead",
    "RelationshipListRead",
    "RelationshipRecordRead",
    "RelationshipSectionRead",
    "SectionRead",
    "TargetRead",
    "UserStatsRead",
    "VisibleFieldsRead",
]
