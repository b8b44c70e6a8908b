"""Routers package."""

from . import (
    health,
    users,
    video,
    tweet,
    subscriptions,
    likes,
    comment,
    playlist,
    dashboard,
)
