"""Domain entities for the data shown on a user's social profile page."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final

from .activity_feed import ActivityFeed
from .relationship import RelationshipRecord
from .visibility import VisibleFieldSet

PERMISSION_BOARD_DELETE: Final[str] = "userboard-delete"


@dataclass(frozen=True)
class Viewer:
    """Identity of the person looking at a profile."""

    actor_id: int | None = None
    permissions: frozenset[str] = frozenset()

    @classmethod
    def anonymous(cls) -> "Viewer":
        return cls()

    @property
    def is_registered(self) -> bool:
        return self.actor_id is not None

    def is_owner_of(self, owner_id: int) -> bool:
        return self.actor_id is not None and self.actor_id == owner_id

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions


@dataclass(frozen=True)
class ProfileDisplayConfig:
    """Which profile sections are rendered and how many entries they list."""

    friends: bool = True
    foes: bool = False
    stats: bool = True
    personal: bool = True
    interests: bool = True
    activity: bool = True
    board: bool = True
    relationship_count: int = 4
    board_display_limit: int = 10


@dataclass(frozen=True)
class UserStats:
    """Counters kept by the host for a profile owner."""

    edits: int = 0
    friend_count: int = 0
    foe_count: int = 0
    board_public: int = 0
    board_private: int = 0


@dataclass(frozen=True)
class RelationshipSection:
    """Friends or foes listed on the profile with their "view all" state."""

    records: tuple[RelationshipRecord, ...]
    total_count: int
    view_all: bool
    source_unavailable: bool = False


@dataclass(frozen=True)
class BoardSummary:
    """Counters for the message board section."""

    total: int
    displayed: int
    view_all: bool


@dataclass(frozen=True)
class SectionResult:
    """Outcome of building one profile section."""

    enabled: bool = True
    failed: bool = False
    data: Any = None

    @property
    def available(self) -> bool:
        return self.enabled and not self.failed


@dataclass(frozen=True)
class ProfileOverview:
    """Everything the presenter needs to render a profile page."""

    owner_id: int
    viewer: Viewer
    is_owner: bool
    visible_fields: VisibleFieldSet
    sections: dict[str, SectionResult] = field(default_factory=dict)

    @property
    def activity(self) -> ActivityFeed | None:
        section = self.sections.get("activity")
        return section.data if section is not None and section.available else None


__all__ = [
    "BoardSummary",
    "PERMISSION_BOARD_DELETE",
    "ProfileDisplayConfig",
    "ProfileOverview",
    "RelationshipSection",
    "SectionResult",
    "UserStats",
    "Viewer",
]
