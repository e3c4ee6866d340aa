"""Field extraction from spotidown response fragments.

The ``data`` field of each JSON envelope is an HTML fragment rather than a
document, so fields are located with fixed patterns. Required fields raise
ExtractionError with a message naming what was expected; optional display
fields fall back to placeholders.
"""

import json
import re

from ..exceptions import ExtractionError, UpstreamError
from ..tracks.models import TrackForm, UpstreamEnvelope

DATA_FIELD_PATTERN = re.compile(r"""name="data" value='([^']+)'""")
BASE_FIELD_PATTERN = re.compile(r'name="base" value="([^"]+)"')
TOKEN_FIELD_PATTERN = re.compile(r'name="token" value="([^"]+)"')

DOWNLOAD_URL_PATTERN = re.compile(r'href="(https://rapid\.spotidown\.app(?:/v2)?\?token=[^"]+)"')
TITLE_PATTERN = re.compile(r'title="([^"]+)"')
ARTIST_PATTERN = re.compile(r"<p><span>([^<]+)</span></p>")

UNKNOWN_NAME = "Unknown"


def parse_envelope(text: str, invalid_json_message: str, error_message: str) -> UpstreamEnvelope:
    """Decode a JSON envelope and reject error or empty payloads.

    Args:
        text: Raw response body
        invalid_json_message: Message used when the body is not a JSON object
        error_message: Fallback message when the server supplies none

    Returns:
        Envelope whose ``data`` is present
    """
    try:
        payload = json.loads(text)
    except (TypeError, ValueError):
        raise UpstreamError(invalid_json_message) from None

    if not isinstance(payload, dict):
        raise UpstreamError(invalid_json_message)

    envelope = UpstreamEnvelope.model_validate(payload)
    if envelope.failed:
        raise UpstreamError(envelope.error_message(error_message))
    if not isinstance(envelope.data, str):
        raise UpstreamError(error_message)
    return envelope


def extract_track_form(html: str) -> TrackForm:
    """Pull the data/base/token hidden inputs out of the first-stage fragment."""
    data = DATA_FIELD_PATTERN.search(html)
    base = BASE_FIELD_PATTERN.search(html)
    token = TOKEN_FIELD_PATTERN.search(html)
    if not data or not base or not token:
        raise ExtractionError("No download form fields found")

    form = TrackForm(data=data.group(1), base=base.group(1), token=token.group(1))
    if not form.is_complete():
        raise ExtractionError("Missing one or more required trackForm fields")
    return form


def extract_download_url(html: str) -> str:
    match = DOWNLOAD_URL_PATTERN.search(html)
    if not match:
        raise ExtractionError("Could not find MP3 download url in Spotidown response")
    return match.group(1)


def extract_track_name(html: str) -> str:
    match = TITLE_PATTERN.search(html)
    return match.group(1) if match else UNKNOWN_NAME


def extract_artist(html: str) -> str:
    match = ARTIST_PATTERN.search(html)
    return match.group(1) if match else ""
