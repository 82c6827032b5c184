"""Pydantic schemas for activity feed endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from socialprofile.domain.entities import ActivityType, FeedState


class TargetRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    namespace: int
    title: str


class ActivityItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    type: ActivityType = Field(..., description="Kind of social event")
    actor_id: int = Field(..., description="Actor who generated the event")
    timestamp: datetime = Field(..., description="Moment the event happened")
    target: TargetRead | None = None
    comment: str | None = None
    related_actor_id: int | None = None
    private: bool = False
    event_id: int | None = None


class FeedEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    item: ActivityItemRead
    position: int = Field(..., description="Index of the item in the sorted raw sequence")
    first_in_group: bool
    last_in_group: bool
    is_boundary: bool = Field(..., description="Whether this entry carries the final styling")


class ActivityFeedRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    owner_id: int
    entries: list[FeedEntryRead]
    limit: int
    total_count: int = Field(..., description="Items matching the type filters before capping")
    displayed_count: int
    style_boundary: int
    has_more: bool
    state: FeedState
    source_unavailable: bool
    error: str | None = None
    activity_types: list[ActivityType] = Field(default_factory=list)

    @field_validator("activity_types", mode="before")
    @classmethod
    def _sort_types(cls, value: object) -> object:
        if isinstance(value, (set, frozenset)):
            return sorted(value, key=lambda activity_type: ActivityType(activity_type).value)
        return value


__all__ = ["ActivityFeedRead", "ActivityItemRead", "FeedEntryRead", "TargetRead"]
