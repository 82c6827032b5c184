"""SQLAlchemy model backing the shared relationship cache."""

from sqlalchemy import Column, DateTime, String, Text

from socialprofile.infrastructure.database import Base


class RelationshipCacheModel(Base):
    """Serialized cache value stored under a string key."""

    __tablename__ = "relationship_cache"

    key = Column(String(255), primary_key=True)
    value = Column(Text, nullable=False)
    expires_at = Column(DateTime, nullable=True)
