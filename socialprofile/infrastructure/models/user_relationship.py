"""SQLAlchemy model for friend and foe relationships."""

from sqlalchemy import Column, DateTime, Integer, UniqueConstraint, func

from socialprofile.infrastructure.database import Base


class UserRelationshipModel(Base):
    """Directed half of a relationship; both directions are stored."""

    __tablename__ = "user_relationship"
    __table_args__ = (
        UniqueConstraint("owner_id", "other_id", name="uq_user_relationship_pair"),
    )

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, nullable=False, index=True)
    other_id = Column(Integer, nullable=False)
    rel_type = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
