"""ORM models used by the application infrastructure."""

from .activity_event import ActivityEventModel
from .profile_privacy import ProfilePrivacyModel
from .relationship_cache import RelationshipCacheModel
from .user_relationship import UserRelationshipModel

__all__ = [
    "ActivityEventModel",
    "ProfilePrivacyModel",
    "RelationshipCacheModel",
    "UserRelationshipModel",
]
