"""SQLAlchemy model for per-field privacy rules."""

from sqlalchemy import Column, Integer, String

from socialprofile.infrastructure.database import Base


class ProfilePrivacyModel(Base):
    """Explicit visibility rule chosen by an owner for one profile field."""

    __tablename__ = "profile_privacy"

    owner_id = Column(Integer, primary_key=True)
    field_name = Column(String(64), primary_key=True)
    rule = Column(String(16), nullable=False)
