"""Pydantic schemas for the profile overview endpoints."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .activity import ActivityFeedRead
from .relationship import RelationshipRecordRead

DataT = TypeVar("DataT")


class VisibleFieldsRead(BaseModel):
    owner_id: int
    viewer_id: int | None = None
    fields: dict[str, bool] = Field(default_factory=dict)


class RelationshipSectionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    records: list[RelationshipRecordRead]
    total_count: int
    view_all: bool = Field(..., description="Whether a link to the full list is shown")
    source_unavailable: bool = False


class UserStatsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    edits: int
    friend_count: int
    foe_count: int
    board_public: int
    board_private: int


class BoardSummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total: int
    displayed: int
    view_all: bool


class SectionRead(BaseModel, Generic[DataT]):
    model_config = ConfigDict(from_attributes=True)

    enabled: bool = True
    failed: bool = False
    data: DataT | None = None


class ProfileSectionsRead(BaseModel):
    friends: SectionRead[RelationshipSectionRead]
    foes: SectionRead[RelationshipSectionRead]
    stats: SectionRead[UserStatsRead]
    personal: SectionRead[list[str]]
    interests: SectionRead[list[str]]
    activity: SectionRead[ActivityFeedRead]
    board: SectionRead[BoardSummaryRead]


class ProfileOverviewRead(BaseModel):
    owner_id: int
    viewer_id: int | None = None
    is_owner: bool
    visible_fields: dict[str, bool]
    sections: ProfileSectionsRead


__all__ = [
    "BoardSummaryRead",
    "ProfileOverviewRead",
    "ProfileSectionsRead",
    "RelationshipSectionRead",
    "SectionRead",
    "UserStatsRead",
    "VisibleFieldsRead",
]
