"""Pydantic schemas for relationship list endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RelationshipRecordRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    actor_id: int
    established_at: datetime


class RelationshipListRead(BaseModel):
    owner_id: int
    rel_type: str = Field(..., description="friends or foes")
    count: int
    records: list[RelationshipRecordRead]
    from_cache: bool
    source_unavailable: bool


__all__ = ["RelationshipListRead", "RelationshipRecordRead"]
