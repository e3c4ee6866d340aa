"""Browser session management using Playwright.

This module provides:
1. BrowserSession - One headless browser with a single page kept on the landing site
2. SessionManager - Single-owner wrapper that serializes page access and keeps the session fresh
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Callable

from playwright.async_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    async_playwright,
)
from playwright.async_api import TimeoutError as PlaywrightTimeout

from ..config import settings
from ..exceptions import NavigationTimeoutError, ResolutionTimeoutError, SessionInitError
from ..tracks.models import SessionInfo

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Sandboxing is unavailable in most containers
BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
]


# =============================================================================
# BrowserSession Class
# =============================================================================


class BrowserSession:
    """Manages one Playwright browser and the single page used for resolution.

    Features:
    - Optional outbound proxy, with credentials passed beside the server in
      the launch proxy option
    - Navigation to the landing page with network-idle wait and timeout

    Usage:
        session = BrowserSession()
        await session.start()
        await session.navigate_to_landing()
        # Use session.page for browser automation
        await session.stop()
    """

    def __init__(
        self,
        landing_url: str | None = None,
        headless: bool | None = None,
        proxy_server: str | None = None,
        proxy_credentials: tuple[str, str] | None = None,
        navigation_timeout: float | None = None,
    ):
        """Initialize browser session.

        Args:
            landing_url: Page to keep the tab on (default from settings)
            headless: Run browser in headless mode (default from settings)
            proxy_server: Proxy scheme://host[:port] without credentials
            proxy_credentials: (username, password) for the proxy
            navigation_timeout: Seconds allowed for a landing navigation
        """
        self.landing_url = landing_url or settings.landing_url
        self.headless = headless if headless is not None else settings.headless
        self.proxy_server = proxy_server
        self.proxy_credentials = proxy_credentials
        self.navigation_timeout = (
            navigation_timeout if navigation_timeout is not None else settings.navigation_timeout
        )
        self.last_navigation: datetime | None = None

        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    @classmethod
    def from_settings(cls) -> "BrowserSession":
        """Build a session from the global settings."""
        if settings.proxy_url and not settings.proxy_server:
            logger.error(f"Invalid proxy URL format, ignoring: {settings.proxy_url!r}")
        return cls(
            proxy_server=settings.proxy_server,
            proxy_credentials=settings.proxy_credentials,
        )

    @property
    def is_connected(self) -> bool:
        """Check if browser is connected and the page is open."""
        return (
            self._browser is not None
            and self._browser.is_connected()
            and self._page is not None
            and not self._page.is_closed()
        )

    @property
    def page(self) -> Page:
        """Get the current page."""
        if self._page is None:
            raise RuntimeError("Browser session not started")
        return self._page

    async def start(self) -> None:
        """Launch the browser and open the page."""
        if self.is_connected:
            return

        logger.info("Initializing browser and page...")
        self._playwright = await async_playwright().start()

        launch_options = {
            "headless": self.headless,
            "args": BROWSER_ARGS,
        }

        if self.proxy_server:
            proxy = {"server": self.proxy_server}
            if self.proxy_credentials:
                proxy["username"], proxy["password"] = self.proxy_credentials
                logger.info("Proxy authentication set")
            launch_options["proxy"] = proxy
            logger.info(f"Using proxy server: {self.proxy_server}")

        self._browser = await self._playwright.chromium.launch(**launch_options)
        logger.info("Browser launched")

        self._context = await self._browser.new_context()
        self._page = await self._context.new_page()

    async def navigate_to_landing(self) -> None:
        """Load the landing page and wait for network quiescence."""
        try:
            await self.page.goto(
                self.landing_url,
                wait_until="networkidle",
                timeout=self.navigation_timeout * 1000,
            )
        except PlaywrightTimeout:
            raise NavigationTimeoutError(
                f"Timed out after {self.navigation_timeout}s loading {self.landing_url}"
            ) from None
        self.last_navigation = datetime.now()
        logger.info(f"Loaded {self.landing_url}")

    async def stop(self) -> None:
        """Close the page, browser and Playwright driver."""
        if self._context:
            await self._context.close()
            self._context = None
            self._page = None

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.info("Browser session stopped")


# =============================================================================
# SessionManager Class
# =============================================================================


class SessionManager:
    """Single owner of the shared browser page.

    Every interaction with the page goes through one lock: resolutions,
    lazy initialization and the periodic landing page refresh. Callers above
    this layer can be fully concurrent.

    Usage:
        manager = SessionManager()
        await manager.start()
        async with manager.exclusive_page() as page:
            # Only this block touches the page
        await manager.close()
    """

    def __init__(
        self,
        session_factory: Callable[[], BrowserSession] | None = None,
        refresh_interval: float | None = None,
    ):
        """Initialize session manager.

        Args:
            session_factory: Builds a new, unstarted BrowserSession
            refresh_interval: Seconds between landing page reloads
        """
        self._session_factory = session_factory or BrowserSession.from_settings
        self.refresh_interval = (
            refresh_interval if refresh_interval is not None else settings.refresh_interval
        )

        self._session: BrowserSession | None = None
        self._lock = asyncio.Lock()
        self._refresh_task: asyncio.Task | None = None

    @property
    def is_ready(self) -> bool:
        """True when a live page is on the landing site."""
        return self._session is not None and self._session.is_connected

    async def ensure_ready(self) -> Page:
        """Make sure a browser and a loaded page exist, creating them if needed."""
        async with self._lock:
            return await self._ensure_ready_locked()

    @asynccontextmanager
    async def exclusive_page(self) -> AsyncIterator[Page]:
        """Hold the page lock for the duration of the block."""
        async with self._lock:
            yield await self._ensure_ready_locked()

    async def _ensure_ready_locked(self) -> Page:
        if self.is_ready:
            return self._session.page

        if self._session is not None:
            logger.info("Browser session disconnected, recreating")
            await self._discard_session()

        session = self._session_factory()
        try:
            await session.start()
            await session.navigate_to_landing()
        except ResolutionTimeoutError:
            await self._stop_quietly(session)
            raise
        except Exception as e:
            await self._stop_quietly(session)
            raise SessionInitError(f"Failed to initialize browser session: {e}") from e

        self._session = session
        logger.info("Browser session ready")
        return session.page

    async def refresh(self) -> bool:
        """Reload the landing page to keep the remote session alive.

        Returns:
            True if a page was refreshed, False if there was none yet
        """
        async with self._lock:
            if not self.is_ready:
                logger.debug("No live page to refresh")
                return False
            await self._session.navigate_to_landing()
            logger.info("Spotidown page refreshed")
            return True

    async def _refresh_loop(self) -> None:
        """Background loop that refreshes the page on a fixed interval."""
        while True:
            try:
                await asyncio.sleep(self.refresh_interval)
                await self.refresh()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Failed to refresh page: {e}")

    def start_refresh(self) -> None:
        """Start the periodic refresh task if it is not running."""
        if self._refresh_task is not None and not self._refresh_task.done():
            return
        self._refresh_task = asyncio.create_task(self._refresh_loop())
        logger.info(f"Page refresh scheduled every {self.refresh_interval:.0f}s")

    async def start(self) -> None:
        """Boot the session eagerly and start the refresh timer."""
        await self.ensure_ready()
        self.start_refresh()

    async def close(self) -> None:
        """Stop the refresh task and close the browser."""
        if self._refresh_task:
            self._refresh_task.cancel()
            try:
                await self._refresh_task
            except asyncio.CancelledError:
                pass
            self._refresh_task = None

        async with self._lock:
            await self._discard_session()

    async def _discard_session(self) -> None:
        if self._session is not None:
            await self._stop_quietly(self._session)
            self._session = None

    async def _stop_quietly(self, session: BrowserSession) -> None:
        try:
            await session.stop()
        except Exception as e:
            logger.warning(f"Error closing browser session: {e}")

    def info(self) -> SessionInfo:
        """Describe the current session."""
        session = self._session
        return SessionInfo(
            connected=session is not None and session.is_connected,
            ready=self.is_ready,
            landing_url=session.landing_url if session else settings.landing_url,
            proxy_server=session.proxy_server if session else settings.proxy_server,
            last_navigation=session.last_navigation if session else None,
            refresh_interval=self.refresh_interval,
        )


# =============================================================================
# Global Instance
# =============================================================================

session_manager = SessionManager()
