"""Domain entity describing a single social event in an activity feed."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Final

from .visibility import FIELD_BOARD_PRIVATE, FIELD_FRIENDS


class ActivityType(str, Enum):
    """Closed set of event kinds recorded in the activity log."""

    EDIT = "edit"
    FRIEND_ADDED = "friend"
    USER_MESSAGE = "user_message"
    SYSTEM_MESSAGE = "system_message"
    VOTE = "vote"


DEFAULT_ACTIVITY_TYPES: Final[frozenset[ActivityType]] = frozenset(
    activity_type for activity_type in ActivityType if activity_type is not ActivityType.VOTE
)

# Profile field an item of each type discloses; ``None`` means the item is public.
_DISCLOSED_FIELD_BY_TYPE: Final[dict[ActivityType, str | None]] = {
    ActivityType.EDIT: None,
    ActivityType.FRIEND_ADDED: FIELD_FRIENDS,
    ActivityType.USER_MESSAGE: None,
    ActivityType.SYSTEM_MESSAGE: None,
    ActivityType.VOTE: None,
}

if set(_DISCLOSED_FIELD_BY_TYPE) != set(ActivityType):  # pragma: no cover - import-time guard
    raise RuntimeError("Every ActivityType needs an entry in the disclosed field table")


@dataclass(frozen=True)
class TargetRef:
    """Page a wiki event refers to; namespace ``0`` is the main namespace."""

    namespace: int
    title: str


@dataclass(frozen=True)
class ActivityItem:
    """Represents one social event attributable to an actor."""

    type: ActivityType
    actor_id: int
    timestamp: datetime
    target: TargetRef | None = None
    comment: str | None = None
    related_actor_id: int | None = None
    private: bool = False
    event_id: int | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.type, ActivityType):
            object.__setattr__(self, "type", ActivityType(self.type))
        if self.type in (ActivityType.FRIEND_ADDED, ActivityType.USER_MESSAGE):
            if self.related_actor_id is None:
                msg = f"{self.type.value} events require a related actor"
                raise ValueError(msg)
        if self.type is ActivityType.EDIT and self.related_actor_id is not None:
            raise ValueError("edit events cannot reference a related actor")
        if self.private and self.type not in (
            ActivityType.USER_MESSAGE,
            ActivityType.SYSTEM_MESSAGE,
        ):
            msg = f"{self.type.value} events cannot be private"
            raise ValueError(msg)

    @property
    def disclosed_field(self) -> str | None:
        """Return the profile field a viewer must be allowed to see for this item."""

        if self.private:
            return FIELD_BOARD_PRIVATE
        return _DISCLOSED_FIELD_BY_TYPE[self.type]

    @property
    def group_key(self) -> tuple[ActivityType, int]:
        """Return the key shared by items that may be grouped together."""

        return (self.type, self.actor_id)


__all__ = [
    "ActivityItem",
    "ActivityType",
    "DEFAULT_ACTIVITY_TYPES",
    "TargetRef",
]
