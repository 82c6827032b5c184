"""Counters derived from the activity log and the relationship table."""

from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session

from socialprofile.domain.entities import ActivityType, RelationshipType, UserStats
from socialprofile.domain.interfaces import StatsProvider
from socialprofile.infrastructure.models import ActivityEventModel, UserRelationshipModel


class StatsRepository(StatsProvider):
    """Compute :class:`UserStats` with aggregate queries."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, owner_id: int) -> UserStats:
        edits = (
            self.session.query(func.count(ActivityEventModel.id))
            .filter(ActivityEventModel.actor_id == owner_id)
            .filter(ActivityEventModel.event_type == ActivityType.EDIT.value)
            .scalar()
            or 0
        )

        relationship_counts = dict(
            self.session.query(UserRelationshipModel.rel_type, func.count(UserRelationshipModel.id))
            .filter(UserRelationshipModel.owner_id == owner_id)
            .group_by(UserRelationshipModel.rel_type)
            .all()
        )

        # Board messages are user messages addressed to the owner.
        board_counts = dict(
            self.session.query(ActivityEventModel.is_private, func.count(ActivityEventModel.id))
            .filter(ActivityEventModel.related_actor_id == owner_id)
            .filter(ActivityEventModel.event_type == ActivityType.USER_MESSAGE.value)
            .group_by(ActivityEventModel.is_private)
            .all()
        )

        return UserStats(
            edits=edits,
            friend_count=relationship_counts.get(int(RelationshipType.FRIEND), 0),
            foe_count=relationship_counts.get(int(RelationshipType.FOE), 0),
            board_public=board_counts.get(False, 0),
            board_private=board_counts.get(True, 0),
        )
