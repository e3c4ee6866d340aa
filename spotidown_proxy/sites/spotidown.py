"""spotidown.app adapter: Spotify track id to MP3 download link."""

import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from ..browser.captcha_handler import RecaptchaSolver
from ..exceptions import InvalidRequestError, SpotidownError
from ..tracks.models import ResolutionResult, TrackResolutionRequest
from .base import BaseSiteAdapter
from .extractors import (
    extract_artist,
    extract_download_url,
    extract_track_form,
    extract_track_name,
    parse_envelope,
)

if TYPE_CHECKING:
    from ..browser.session import SessionManager

logger = logging.getLogger(__name__)


class SpotidownAdapter(BaseSiteAdapter):
    """Drives spotidown.app's two-step download form inside the shared page.

    Step one posts the ``spotifyurl`` form (track URL plus reCAPTCHA token) to
    ``/action`` and gets back a fragment holding a second form. Step two posts
    that form's data/base/token to ``/action/track``, whose fragment carries
    the download link. The whole exchange runs under the session lock.
    """

    name = "Spotidown"

    form_name = "spotifyurl"
    url_input = 'input[name="url"]'
    challenge_input = 'input[name="g-recaptcha-response"]'
    lookup_endpoint = "/action"
    track_endpoint = "/action/track"

    def __init__(
        self,
        sessions: "SessionManager",
        solver: RecaptchaSolver | None = None,
        fetch_timeout: float | None = None,
    ):
        super().__init__(sessions, fetch_timeout=fetch_timeout)
        self.solver = solver or RecaptchaSolver()

    async def resolve(self, track_id: str) -> ResolutionResult:
        try:
            request = TrackResolutionRequest(track_id=track_id)
        except ValidationError:
            raise InvalidRequestError("Track ID is required") from None

        logger.info(f"Resolving track {request.track_id}")
        try:
            async with self.sessions.exclusive_page() as page:
                result = await self._run_pipeline(page, request)
        except SpotidownError as e:
            logger.warning(f"Resolution failed for {request.track_id}: {e}")
            raise

        logger.info(f"Resolved {request.track_id}: {result.name!r} by {result.artist!r}")
        return result

    async def _run_pipeline(self, page, request: TrackResolutionRequest) -> ResolutionResult:
        await self._set_input(page, self.url_input, request.spotify_url)

        token = await self.solver.solve(page)
        await self._set_input(page, self.challenge_input, token)

        fields = await self._snapshot_form(page, self.form_name)
        lookup_text = await self._submit_form(page, self.lookup_endpoint, fields)
        lookup = parse_envelope(
            lookup_text,
            invalid_json_message="Invalid JSON from Spotidown",
            error_message="Spotidown returned error",
        )
        track_form = extract_track_form(lookup.data)

        track_text = await self._submit_form(page, self.track_endpoint, track_form.as_fields())
        track = parse_envelope(
            track_text,
            invalid_json_message="Invalid JSON from Spotidown track API",
            error_message="Spotidown track returned error",
        )

        return ResolutionResult(
            url=extract_download_url(track.data),
            name=extract_track_name(track.data),
            artist=extract_artist(track.data),
        )
