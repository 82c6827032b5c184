from __future__ import annotations

from datetime import timedelta

import pytest
from pydantic import ValidationError

from socialprofile import config
from socialprofile.utils import datetime as datetime_utils


def test_settings_build_feed_and_display_config(monkeypatch) -> None:
    monkeypatch.setenv("ACTIVITY_DISPLAY_LIMIT", "6")
    monkeypatch.setenv("ACTIVITY_HARD_CAP", "30")
    monkeypatch.setenv("PROFILE_SHOW_FOES", "true")

    settings = config.Settings()

    assert settings.feed_config().display_limit == 6
    assert settings.feed_config().hard_cap == 30
    assert settings.display_config().foes is True
    assert settings.display_config().relationship_count == 4


def test_display_limit_cannot_exceed_hard_cap(monkeypatch) -> None:
    monkeypatch.setenv("ACTIVITY_DISPLAY_LIMIT", "50")
    monkeypatch.setenv("ACTIVITY_HARD_CAP", "40")

    with pytest.raises(ValidationError):
        config.Settings()


def test_fixed_offset_timezone_fallback() -> None:
    tz = datetime_utils._resolve_timezone("UTC-05:00")

    assert tz.utcoffset(None) == timedelta(hours=-5)


def test_unknown_timezone_falls_back_to_utc() -> None:
    tz = datetime_utils._resolve_timezone("Mars/Olympus")

    assert tz.utcoffset(None) == timedelta(0)
