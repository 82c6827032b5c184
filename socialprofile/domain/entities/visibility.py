"""Domain entities describing which profile fields a viewer may see."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Final


class VisibilityRule(str, Enum):
    """Per-field privacy setting chosen by a profile owner."""

    PUBLIC = "public"
    REGISTERED = "registered"
    FRIENDS = "friends"
    HIDDEN = "hidden"


FIELD_LOCATION_CITY: Final[str] = "location_city"
FIELD_LOCATION_STATE: Final[str] = "location_state"
FIELD_LOCATION_COUNTRY: Final[str] = "location_country"
FIELD_HOMETOWN_CITY: Final[str] = "hometown_city"
FIELD_HOMETOWN_COUNTRY: Final[str] = "hometown_country"
FIELD_REAL_NAME: Final[str] = "real_name"
FIELD_BIRTHDAY: Final[str] = "birthday"
FIELD_OCCUPATION: Final[str] = "occupation"
FIELD_WEBSITES: Final[str] = "websites"
FIELD_ABOUT: Final[str] = "about"
FIELD_FRIENDS: Final[str] = "friends"
FIELD_FOES: Final[str] = "foes"
FIELD_BOARD_PRIVATE: Final[str] = "board_private"

PERSONAL_FIELDS: Final[tuple[str, ...]] = (
    FIELD_LOCATION_CITY,
    FIELD_LOCATION_STATE,
    FIELD_LOCATION_COUNTRY,
    FIELD_HOMETOWN_CITY,
    FIELD_HOMETOWN_COUNTRY,
    FIELD_REAL_NAME,
    FIELD_BIRTHDAY,
    FIELD_OCCUPATION,
    FIELD_WEBSITES,
    FIELD_ABOUT,
)

INTEREST_FIELDS: Final[tuple[str, ...]] = (
    "movies",
    "tv",
    "music",
    "books",
    "video_games",
    "magazines",
    "snacks",
    "drinks",
)

SOCIAL_FIELDS: Final[tuple[str, ...]] = (
    FIELD_FRIENDS,
    FIELD_FOES,
    FIELD_BOARD_PRIVATE,
)

PROFILE_FIELDS: Final[tuple[str, ...]] = PERSONAL_FIELDS + INTEREST_FIELDS + SOCIAL_FIELDS

# Shown to anonymous viewers unless the owner sets an explicit rule.
ALWAYS_PUBLIC_FIELDS: Final[frozenset[str]] = frozenset(
    {FIELD_LOCATION_STATE, FIELD_WEBSITES, FIELD_ABOUT, FIELD_FRIENDS}
)

# Only the owner may ever see these, whatever rule is stored for them.
OWNER_ONLY_FIELDS: Final[frozenset[str]] = frozenset({FIELD_BOARD_PRIVATE})


@dataclass(frozen=True)
class VisibleFieldSet(Mapping[str, bool]):
    """Visibility of every known profile field for one (owner, viewer) pair."""

    owner_id: int
    viewer_id: int | None
    fields: Mapping[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def __getitem__(self, name: str) -> bool:
        return self.fields[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def is_visible(self, name: str | None) -> bool:
        """Return ``True`` when ``name`` is visible; ``None`` means no field is involved."""

        if name is None:
            return True
        return self.fields.get(name, False)

    def visible(self, names: Iterable[str] | None = None) -> list[str]:
        """Return the visible field names, optionally restricted to ``names``."""

        candidates = self.fields if names is None else names
        return [name for name in candidates if self.fields.get(name, False)]


__all__ = [
    "ALWAYS_PUBLIC_FIELDS",
    "FIELD_ABOUT",
    "FIELD_BIRTHDAY",
    "FIELD_BOARD_PRIVATE",
    "FIELD_FOES",
    "FIELD_FRIENDS",
    "FIELD_HOMETOWN_CITY",
    "FIELD_HOMETOWN_COUNTRY",
    "FIELD_LOCATION_CITY",
    "FIELD_LOCATION_COUNTRY",
    "FIELD_LOCATION_STATE",
    "FIELD_OCCUPATION",
    "FIELD_REAL_NAME",
    "FIELD_WEBSITES",
    "INTEREST_FIELDS",
    "OWNER_ONLY_FIELDS",
    "PERSONAL_FIELDS",
    "PROFILE_FIELDS",
    "SOCIAL_FIELDS",
    "VisibilityRule",
    "VisibleFieldSet",
]
