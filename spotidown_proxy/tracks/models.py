"""Data models for track resolution."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator


class TrackResolutionRequest(BaseModel):
    """A track identifier to resolve."""

    track_id: str = Field(min_length=1)

    @field_validator("track_id")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("track_id must not be empty")
        return value

    @property
    def spotify_url(self) -> str:
        """Canonical open.spotify.com URL typed into the page."""
        return f"https://open.spotify.com/track/{self.track_id}"


class FormField(BaseModel):
    """One name/value pair captured from a live form."""

    name: str
    value: str = ""


class TrackForm(BaseModel):
    """Tokens from the first-stage response, posted to /action/track."""

    data: str
    base: str
    token: str

    def is_complete(self) -> bool:
        """True when all three tokens are non-empty."""
        return bool(self.data and self.base and self.token)

    def as_fields(self) -> list[FormField]:
        return [
            FormField(name="data", value=self.data),
            FormField(name="base", value=self.base),
            FormField(name="token", value=self.token),
        ]


class UpstreamEnvelope(BaseModel):
    """JSON envelope returned by both spotidown endpoints."""

    error: Any = None
    message: Any = None
    data: Any = None

    @property
    def failed(self) -> bool:
        return bool(self.error) or not self.data

    def error_message(self, fallback: str) -> str:
        return str(self.message) if self.message else fallback


class ResolutionResult(BaseModel):
    """Final download link with display metadata."""

    url: str
    name: str = "Unknown"
    artist: str = ""


class ErrorResponse(BaseModel):
    """Uniform error body returned by the request handlers."""

    error: bool = True
    message: str


class SessionInfo(BaseModel):
    """Snapshot of the shared browser session."""

    connected: bool
    ready: bool
    landing_url: str
    proxy_server: str | None = None
    last_navigation: datetime | None = None
    refresh_interval: float
