"""Domain entities describing social relationships between actors."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum


class RelationshipType(IntEnum):
    """Kind of social edge between two actors."""

    FRIEND = 1
    FOE = 2

    @property
    def slug(self) -> str:
        """Plural name used in URLs (``friends`` or ``foes``)."""

        return "friends" if self is RelationshipType.FRIEND else "foes"

    @classmethod
    def from_slug(cls, value: str) -> "RelationshipType":
        normalized = value.strip().lower()
        for rel_type in cls:
            if normalized in (rel_type.slug, rel_type.slug[:-1], str(rel_type.value)):
                return rel_type
        msg = f"Unknown relationship type {value!r}"
        raise ValueError(msg)


@dataclass(frozen=True)
class RelationshipRecord:
    """One relationship of a profile owner with another actor."""

    actor_id: int
    established_at: datetime


@dataclass(frozen=True)
class RelationshipLookup:
    """Result of a cached relationship lookup."""

    records: tuple[RelationshipRecord, ...]
    from_cache: bool = False
    source_unavailable: bool = False


__all__ = ["RelationshipLookup", "RelationshipRecord", "RelationshipType"]
