"""Catalog module - Spotify lookups."""

from .spotify import SpotifyCatalog, extract_track_id

__all__ = [
    "SpotifyCatalog",
    "extract_track_id",
]
