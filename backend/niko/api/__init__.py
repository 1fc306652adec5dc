"""API routers."""

from niko.api import chat, notion, preferences

__all__ = [
    "chat",
    "notion",
    "preferences",
]
