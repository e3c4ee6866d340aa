"""
Shared test doubles for the browser layer.

FakePage stands in for a Playwright page on spotidown.app: it keeps the
form inputs the pipeline writes and answers the in-page fetches with canned
envelopes. Every evaluate yields to the event loop so unserialized callers
would interleave.
"""

import asyncio
import json

import pytest

from spotidown_proxy.browser.captcha_handler import RECAPTCHA_EXECUTE_JS
from spotidown_proxy.browser.session import SessionManager
from spotidown_proxy.sites.base import SET_INPUT_JS, SNAPSHOT_FORM_JS, SUBMIT_FORM_JS
from spotidown_proxy.sites.spotidown import SpotidownAdapter


def lookup_fragment(data="X", base="Y", token="Z"):
    return (
        "<form name='trackform' method='post'>"
        f"<input type=\"hidden\" name=\"data\" value='{data}'>"
        f'<input type="hidden" name="base" value="{base}">'
        f'<input type="hidden" name="token" value="{token}">'
        "</form>"
    )


def track_fragment(url, name=None, artist=None):
    parts = ['<div class="spotidown-downloader">']
    if name is not None:
        parts.append(f'<img src="cover.jpg" title="{name}">')
    if artist is not None:
        parts.append(f"<p><span>{artist}</span></p>")
    parts.append(f'<a href="{url}" class="abutton">Download Mp3</a>')
    parts.append("</div>")
    return "".join(parts)


def envelope(data=None, error=False, message=None):
    payload = {"error": error}
    if data is not None:
        payload["data"] = data
    if message is not None:
        payload["message"] = message
    return json.dumps(payload)


def default_lookup(fields):
    """Echo the submitted Spotify URL back through the track form tokens."""
    url = fields.get("url", "")
    track_id = url.rsplit("/", 1)[-1]
    return envelope(lookup_fragment(data=f"data-{track_id}", base="base", token=f"tok-{track_id}"))


def default_track(fields):
    track_id = fields["data"].removeprefix("data-")
    return envelope(
        track_fragment(
            f"https://rapid.spotidown.app/v2?token={track_id}",
            name=f"Song {track_id}",
            artist=f"Artist {track_id}",
        )
    )


class FakePage:
    """Minimal async stand-in for playwright.async_api.Page."""

    def __init__(self, lookup=default_lookup, track=default_track, captcha="captcha-token"):
        self.lookup = lookup
        self.track = track
        self.captcha = captcha
        self.inputs = {}
        self.events = []
        self.closed = False
        self.form_present = True

    def is_closed(self):
        return self.closed

    def reset_form(self):
        self.inputs = {}

    async def evaluate(self, script, arg=None):
        await asyncio.sleep(0)
        if script == SET_INPUT_JS:
            self.events.append(("set", arg["selector"]))
            self.inputs[arg["selector"]] = arg["value"]
            return True
        if script == RECAPTCHA_EXECUTE_JS:
            self.events.append(("captcha", arg["action"]))
            if isinstance(self.captcha, Exception):
                raise self.captcha
            return self.captcha
        if script == SNAPSHOT_FORM_JS:
            self.events.append(("snapshot", arg))
            if not self.form_present:
                return None
            return [
                {"name": "url", "value": self.inputs.get('input[name="url"]', "")},
                {
                    "name": "g-recaptcha-response",
                    "value": self.inputs.get('input[name="g-recaptcha-response"]', ""),
                },
            ]
        if script == SUBMIT_FORM_JS:
            endpoint = arg["endpoint"]
            fields = {field["name"]: field["value"] for field in arg["fields"]}
            self.events.append(("submit", endpoint, fields))
            await asyncio.sleep(0)
            if endpoint == "/action":
                return self.lookup(fields)
            if endpoint == "/action/track":
                return self.track(fields)
        raise AssertionError(f"unexpected script: {script!r}")

    def submissions(self, endpoint=None):
        return [e for e in self.events if e[0] == "submit" and (endpoint is None or e[1] == endpoint)]


class FakeSession:
    """Stand-in for BrowserSession that never launches a browser."""

    def __init__(self, page=None, fail_start=None, fail_navigate=None):
        self.landing_url = "https://spotidown.app/"
        self.proxy_server = None
        self.last_navigation = None
        self.fail_start = fail_start
        self.fail_navigate = fail_navigate
        self.started = False
        self.stopped = False
        self.navigations = 0
        self._page = page or FakePage()

    @property
    def is_connected(self):
        return self.started and not self.stopped and not self._page.is_closed()

    @property
    def page(self):
        return self._page

    async def start(self):
        if self.fail_start:
            raise self.fail_start
        self.started = True

    async def navigate_to_landing(self):
        await asyncio.sleep(0)
        if self.fail_navigate:
            raise self.fail_navigate
        self.navigations += 1
        self._page.events.append(("navigate",))
        self._page.reset_form()

    async def stop(self):
        self.stopped = True


class SessionFactory:
    """Hands out FakeSessions and remembers them."""

    def __init__(self, **session_kwargs):
        self.session_kwargs = session_kwargs
        self.created = []

    def __call__(self):
        session = FakeSession(**self.session_kwargs)
        self.created.append(session)
        return session


@pytest.fixture
def fake_page():
    return FakePage()


@pytest.fixture
def session_factory(fake_page):
    return SessionFactory(page=fake_page)


@pytest.fixture
def manager(session_factory):
    return SessionManager(session_factory=session_factory, refresh_interval=300)


@pytest.fixture
def adapter(manager):
    return SpotidownAdapter(manager, fetch_timeout=5)
