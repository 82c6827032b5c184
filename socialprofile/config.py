"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from socialprofile.domain.entities import FeedConfig, ProfileDisplayConfig

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./socialprofile.db",
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    app_timezone: str | None = Field(
        default=None,
        description="Timezone used to localize activity timestamps",
    )
    activity_display_limit: int = Field(
        default=8,
        description="Number of activity items shown on the profile page",
        gt=0,
    )
    activity_hard_cap: int = Field(
        default=40,
        description="Maximum number of items shown on the friends' activity page",
        gt=0,
    )
    network_friend_count: int = Field(
        default=50,
        description="Number of friends whose activity feeds the network feed",
        gt=0,
    )
    relationship_profile_count: int = Field(
        default=4,
        description="Number of friends or foes listed on the profile page",
        gt=0,
    )
    board_display_limit: int = Field(
        default=10,
        description="Number of board messages shown before linking to the full board",
        gt=0,
    )
    relationship_cache_ttl_seconds: int | None = Field(
        default=None,
        description="Optional upper bound on the lifetime of cached relationship lists",
        gt=0,
    )
    relationship_cache_backend: Literal["memory", "database"] = Field(
        default="memory",
        description="Where cached relationship lists live: process memory or the database",
    )
    source_timeout_seconds: float = Field(
        default=5.0,
        description="Time budget for each call into the activity store or relationship graph",
        gt=0,
    )
    profile_show_friends: bool = True
    profile_show_foes: bool = False
    profile_show_stats: bool = True
    profile_show_personal: bool = True
    profile_show_interests: bool = True
    profile_show_activity: bool = True
    profile_show_board: bool = True

    @model_validator(mode="after")
    def _validate_windows(self) -> "Settings":
        if self.activity_display_limit > self.activity_hard_cap:
            raise ValueError(
                "ACTIVITY_DISPLAY_LIMIT must not exceed ACTIVITY_HARD_CAP"
            )
        return self

    def feed_config(self) -> FeedConfig:
        """Return the explicit feed configuration derived from these settings."""

        return FeedConfig(
            display_limit=self.activity_display_limit,
            hard_cap=self.activity_hard_cap,
            network_friend_count=self.network_friend_count,
            source_timeout=self.source_timeout_seconds,
        )

    def display_config(self) -> ProfileDisplayConfig:
        """Return which profile sections are enabled and how large they are."""

        return ProfileDisplayConfig(
            friends=self.profile_show_friends,
            foes=self.profile_show_foes,
            stats=self.profile_show_stats,
            personal=self.profile_show_personal,
            interests=self.profile_show_interests,
            activity=self.profile_show_activity,
            board=self.profile_show_board,
            relationship_count=self.relationship_profile_count,
            board_display_limit=self.board_display_limit,
        )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
