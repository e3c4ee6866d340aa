"""Base adapter interface for download sites driven through the shared page."""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ..browser.page_script import execute_in_page
from ..config import settings
from ..exceptions import ExtractionError, FetchTimeoutError
from ..tracks.models import FormField, ResolutionResult

if TYPE_CHECKING:
    from playwright.async_api import Page

    from ..browser.session import SessionManager

logger = logging.getLogger(__name__)


SET_INPUT_JS = """
({ selector, value }) => {
    const input = document.querySelector(selector);
    if (!input) return false;
    input.value = value;
    return true;
}
"""

SNAPSHOT_FORM_JS = """
(formName) => {
    const form = document.forms.namedItem(formName);
    if (!form) return null;
    const entries = [];
    for (const [name, value] of new FormData(form).entries()) {
        entries.push({ name, value: typeof value === 'string' ? value : '' });
    }
    return entries;
}
"""

SUBMIT_FORM_JS = """
({ endpoint, fields }) => {
    const form = new FormData();
    fields.forEach(({ name, value }) => form.append(name, value));
    return fetch(endpoint, {
        method: 'POST',
        body: form,
        credentials: 'include',
    }).then((res) => res.text());
}
"""


class BaseSiteAdapter(ABC):
    """Base class for site adapters that submit forms from inside the page."""

    # Site identification
    name: str

    def __init__(self, sessions: "SessionManager", fetch_timeout: float | None = None):
        """Initialize adapter with the shared session manager.

        Args:
            sessions: Owner of the shared page
            fetch_timeout: Seconds allowed for each in-page submission
        """
        self.sessions = sessions
        self.fetch_timeout = fetch_timeout if fetch_timeout is not None else settings.fetch_timeout

    @abstractmethod
    async def resolve(self, track_id: str) -> ResolutionResult:
        """
        Resolve a Spotify track id into a download link.

        Args:
            track_id: Spotify track identifier

        Returns:
            ResolutionResult with the download URL and display metadata
        """
        pass

    async def _set_input(self, page: "Page", selector: str, value: str) -> bool:
        """Write ``value`` into the first input matching ``selector``.

        Returns:
            False if no such input exists on the page
        """
        found = await execute_in_page(
            page,
            SET_INPUT_JS,
            {"selector": selector, "value": value},
            timeout=self.fetch_timeout,
            description=f"setting {selector}",
        )
        if not found:
            logger.warning(f"Input {selector} not found on {self.name} page")
        return bool(found)

    async def _snapshot_form(self, page: "Page", form_name: str) -> list[FormField]:
        """Capture all name/value pairs of a named form.

        Raises:
            ExtractionError: If the page has no form with that name
        """
        entries = await execute_in_page(
            page,
            SNAPSHOT_FORM_JS,
            form_name,
            timeout=self.fetch_timeout,
            description=f"reading form {form_name}",
        )
        if entries is None:
            raise ExtractionError(f"Form {form_name} not found")
        return [FormField.model_validate(entry) for entry in entries]

    async def _submit_form(self, page: "Page", endpoint: str, fields: list[FormField]) -> str:
        """POST ``fields`` as multipart form data from inside the page.

        Args:
            page: Page whose cookies and origin are used
            endpoint: Path relative to the page origin
            fields: Form fields, in order

        Returns:
            Response body as text
        """
        logger.debug(f"Submitting {len(fields)} fields to {endpoint}")
        return await execute_in_page(
            page,
            SUBMIT_FORM_JS,
            {"endpoint": endpoint, "fields": [field.model_dump() for field in fields]},
            timeout=self.fetch_timeout,
            description=f"POST {endpoint}",
            timeout_error=FetchTimeoutError,
        )
