"""Bounded script execution inside a live page.

Everything spotidown accepts has to originate from the page itself (its
cookies and origin), so the pipeline talks to the site only through
``page.evaluate``. This module wraps that call with a timeout and maps
failures onto the resolution error hierarchy.
"""

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from playwright.async_api import Error as PlaywrightError

from ..exceptions import (
    PageScriptError,
    PageScriptTimeoutError,
    ResolutionError,
    ResolutionTimeoutError,
)

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)


async def execute_in_page(
    page: "Page",
    script: str,
    arg: Any = None,
    *,
    timeout: float,
    description: str = "page script",
    timeout_error: type[ResolutionTimeoutError] = PageScriptTimeoutError,
    error: type[ResolutionError] | None = None,
) -> Any:
    """Evaluate ``script`` in ``page`` and return its (JSON-serializable) result.

    Args:
        page: Playwright page to run in
        script: JavaScript function source, called with ``arg``
        arg: Argument passed to the function
        timeout: Seconds to wait before giving up
        description: Human-readable name used in error messages
        timeout_error: Exception class raised when the timeout expires
        error: Exception class raised when the script throws
            (defaults to PageScriptError)

    Returns:
        Whatever the script resolves to
    """
    try:
        return await asyncio.wait_for(page.evaluate(script, arg), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"{description} timed out after {timeout}s")
        raise timeout_error(f"Timed out after {timeout}s waiting for {description}") from None
    except PlaywrightError as e:
        error_cls = error or PageScriptError
        raise error_cls(f"{description} failed: {e.message}") from e
