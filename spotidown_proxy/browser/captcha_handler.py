"""reCAPTCHA v3 token acquisition inside the shared page.

The landing page loads Google's reCAPTCHA v3 script and expects a fresh token
in its hidden ``g-recaptcha-response`` input on every submission. The token is
bound to the page's origin, so it is minted by calling ``grecaptcha.execute``
from within the page rather than from this process.
"""

import logging
from typing import TYPE_CHECKING

from ..config import settings
from ..exceptions import ChallengeError, ChallengeTimeoutError
from .page_script import execute_in_page

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)


RECAPTCHA_EXECUTE_JS = """
({ siteKey, action }) => new Promise((resolve, reject) => {
    if (typeof grecaptcha === 'undefined') {
        reject(new Error('grecaptcha is not loaded on this page'));
        return;
    }
    grecaptcha.ready(() => {
        grecaptcha.execute(siteKey, { action }).then(resolve, reject);
    });
})
"""


class RecaptchaSolver:
    """Mints reCAPTCHA v3 tokens through the page's own grecaptcha client.

    No retries: a missing library, a rejected execution or an empty token
    all fail the current resolution.

    Usage:
        solver = RecaptchaSolver()
        token = await solver.solve(page)
    """

    def __init__(
        self,
        site_key: str | None = None,
        action: str | None = None,
        timeout: float | None = None,
    ):
        """Initialize solver.

        Args:
            site_key: reCAPTCHA site key (default from settings)
            action: reCAPTCHA action name (default from settings)
            timeout: Seconds to wait for a token (default from settings)
        """
        self.site_key = site_key or settings.recaptcha_site_key
        self.action = action or settings.recaptcha_action
        self.timeout = timeout if timeout is not None else settings.challenge_timeout

    async def solve(self, page: "Page") -> str:
        """Execute the challenge in ``page`` and return the proof token."""
        token = await execute_in_page(
            page,
            RECAPTCHA_EXECUTE_JS,
            {"siteKey": self.site_key, "action": self.action},
            timeout=self.timeout,
            description="reCAPTCHA token",
            timeout_error=ChallengeTimeoutError,
            error=ChallengeError,
        )
        if not isinstance(token, str) or not token:
            raise ChallengeError("reCAPTCHA returned an empty token")

        logger.debug(f"Obtained reCAPTCHA token ({len(token)} chars)")
        return token
