"""Spotify catalog lookups: ISRC search and track id parsing."""

import asyncio
import logging
import re

import spotipy
from spotipy.exceptions import SpotifyException
from spotipy.oauth2 import SpotifyClientCredentials, SpotifyOauthError

from ..config import settings
from ..exceptions import CatalogError, ConfigurationError

logger = logging.getLogger(__name__)

TRACK_ID_PATTERN = re.compile(r"track/([a-zA-Z0-9]+)")


def extract_track_id(value: str) -> str:
    """Get the track id from a Spotify URL, or return the input as the id.

    Args:
        value: URL such as https://open.spotify.com/track/<id>?si=..., or a bare id

    Returns:
        The id segment after ``track/`` if present, otherwise the stripped input
    """
    value = value.strip()
    match = TRACK_ID_PATTERN.search(value)
    return match.group(1) if match else value


class SpotifyCatalog:
    """Client-credentials Spotify client used to map ISRCs onto track ids."""

    def __init__(self, client_id: str | None = None, client_secret: str | None = None):
        self.client_id = client_id if client_id is not None else settings.client_id
        self.client_secret = client_secret if client_secret is not None else settings.client_secret
        self._client: spotipy.Spotify | None = None

    def _get_client(self) -> spotipy.Spotify:
        if self._client is None:
            if not self.client_id or not self.client_secret:
                raise ConfigurationError(
                    "Spotify client credentials are not set. "
                    "Please set CLIENT_ID and CLIENT_SECRET."
                )
            auth_manager = SpotifyClientCredentials(
                client_id=self.client_id,
                client_secret=self.client_secret,
            )
            self._client = spotipy.Spotify(auth_manager=auth_manager)
        return self._client

    def find_track_id(self, isrc: str) -> str | None:
        """Search the catalog for a track with this ISRC.

        Returns:
            Track id of the first match, or None
        """
        client = self._get_client()
        try:
            results = client.search(q=f"isrc:{isrc}", type="track", limit=1)
        except (SpotifyException, SpotifyOauthError) as e:
            raise CatalogError(f"Spotify search failed: {e}") from e

        items = (results or {}).get("tracks", {}).get("items") or []
        if not items or not items[0].get("id"):
            logger.info(f"No Spotify track for ISRC {isrc}")
            return None

        track_id = items[0]["id"]
        logger.info(f"ISRC {isrc} -> track {track_id}")
        return track_id

    async def find_track_id_async(self, isrc: str) -> str | None:
        """Run find_track_id in a worker thread."""
        return await asyncio.to_thread(self.find_track_id, isrc)
