"""
Exception hierarchy for spotidown-proxy.

Everything raised on purpose derives from SpotidownError so the request
handlers can map it onto a JSON error body without catching unrelated bugs.
"""


class SpotidownError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(SpotidownError):
    """Raised when a required setting is missing or malformed."""


class InvalidRequestError(SpotidownError):
    """Raised when a request is missing a required parameter."""


class TrackNotFoundError(SpotidownError):
    """Raised when an ISRC has no matching catalog track."""


class CatalogError(SpotidownError):
    """Raised when the Spotify catalog lookup itself fails."""


class SessionInitError(SpotidownError):
    """Raised when the browser or the landing page cannot be brought up."""


class ResolutionError(SpotidownError):
    """Base class for failures while resolving a track to a download URL."""


class UpstreamError(ResolutionError):
    """Raised when spotidown returns malformed JSON or an error envelope."""


class ExtractionError(ResolutionError):
    """Raised when a required field is missing from a response fragment."""


class ChallengeError(ResolutionError):
    """Raised when the in-page reCAPTCHA execution fails."""


class PageScriptError(ResolutionError):
    """Raised when a script evaluated inside the page throws."""


class ResolutionTimeoutError(ResolutionError):
    """Base class for bounded waits that ran out."""


class NavigationTimeoutError(ResolutionTimeoutError):
    """Raised when the landing page does not settle in time."""


class ChallengeTimeoutError(ResolutionTimeoutError):
    """Raised when no reCAPTCHA token is produced in time."""


class FetchTimeoutError(ResolutionTimeoutError):
    """Raised when an in-page form submission does not answer in time."""


class PageScriptTimeoutError(ResolutionTimeoutError):
    """Raised when any other in-page script does not return in time."""
