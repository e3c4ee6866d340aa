"""Browser module - browser automation and session management."""

from .captcha_handler import RecaptchaSolver
from .page_script import execute_in_page
from .session import (
    # Core classes
    BrowserSession,
    SessionManager,
    # Global instance
    session_manager,
    # Constants
    BROWSER_ARGS,
)

__all__ = [
    # Session management
    "BrowserSession",
    "SessionManager",
    "session_manager",
    "BROWSER_ARGS",
    # In-page execution
    "execute_in_page",
    # CAPTCHA handling
    "RecaptchaSolver",
]
