"""Tracks module - data models."""

from .models import (
    ErrorResponse,
    FormField,
    ResolutionResult,
    SessionInfo,
    TrackForm,
    TrackResolutionRequest,
    UpstreamEnvelope,
)

__all__ = [
    "ErrorResponse",
    "FormField",
    "ResolutionResult",
    "SessionInfo",
    "TrackForm",
    "TrackResolutionRequest",
    "UpstreamEnvelope",
]
