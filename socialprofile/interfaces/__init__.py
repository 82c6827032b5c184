"""Adapters exposing the social profile core to the outside world."""
