"""Repository implementations for infrastructure layer."""

from .activity_repository import ActivityRepository
from .privacy_repository import PrivacyRepository
from .relationship_repository import RelationshipRepository
from .stats_repository import StatsRepository

__all__ = [
    "ActivityRepository",
    "PrivacyRepository",
    "RelationshipRepository",
    "StatsRepository",
]
