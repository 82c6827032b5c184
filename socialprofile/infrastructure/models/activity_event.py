"""SQLAlchemy model for the social activity log."""

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text, func
from sqlalchemy.sql import expression

from socialprofile.infrastructure.database import Base


class ActivityEventModel(Base):
    """One social event recorded by the host application."""

    __tablename__ = "activity_event"
    __table_args__ = (Index("ix_activity_event_actor_created", "actor_id", "created_at"),)

    id = Column(Integer, primary_key=True, index=True)
    event_type = Column(String(32), nullable=False, index=True)
    actor_id = Column(Integer, nullable=False)
    related_actor_id = Column(Integer, nullable=True, index=True)
    target_namespace = Column(Integer, nullable=True)
    target_title = Column(String(255), nullable=True)
    comment = Column(Text, nullable=True)
    is_private = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    created_at = Column(DateTime, nullable=False, server_default=func.now())
