"""Sites module - download site adapters."""

from .base import BaseSiteAdapter
from .spotidown import SpotidownAdapter

__all__ = [
    "BaseSiteAdapter",
    "SpotidownAdapter",
]
