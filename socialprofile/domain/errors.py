"""Exceptions raised by the social profile core."""

from __future__ import annotations


class SocialProfileError(Exception):
    """Base class for errors raised by the social profile core."""


class SourceUnavailable(SocialProfileError):
    """The activity store or relationship graph could not be reached in time."""

    def __init__(self, source: str, reason: str | None = None) -> None:
        self.source = source
        self.reason = reason
        message = f"{source} is unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvalidFilter(SocialProfileError, ValueError):
    """A caller supplied contradictory or out-of-range filter or limit values."""


class CacheCorruption(SocialProfileError):
    """A cached value failed structural validation when it was read back."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Cached value for {key!r} is corrupt: {reason}")


__all__ = [
    "CacheCorruption",
    "InvalidFilter",
    "SocialProfileError",
    "SourceUnavailable",
]
