"""Tests for the HTTP request handlers."""

import pytest
from fastapi.testclient import TestClient

from spotidown_proxy.api.server import create_app
from spotidown_proxy.exceptions import (
    CatalogError,
    FetchTimeoutError,
    InvalidRequestError,
    UpstreamError,
)
from spotidown_proxy.tracks import ResolutionResult

DOWNLOAD_URL = "https://rapid.spotidown.app/v2?token=abc123"


class FakeAdapter:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def resolve(self, track_id):
        self.calls.append(track_id)
        if not track_id.strip():
            raise InvalidRequestError("Track ID is required")
        if self.error:
            raise self.error
        return ResolutionResult(url=DOWNLOAD_URL, name="Mr. Brightside", artist="The Killers")


class FakeCatalog:
    def __init__(self, track_id="3n3Ppam7vgaVa1iaRUc9Lp", error=None):
        self.track_id = track_id
        self.error = error
        self.calls = []

    async def find_track_id_async(self, isrc):
        self.calls.append(isrc)
        if self.error:
            raise self.error
        return self.track_id


@pytest.fixture
def fake_adapter():
    return FakeAdapter()


@pytest.fixture
def fake_catalog():
    return FakeCatalog()


@pytest.fixture
def client(manager, fake_adapter, fake_catalog):
    app = create_app(sessions=manager, adapter=fake_adapter, catalog=fake_catalog, boot_session=False)
    return TestClient(app)


def test_track_redirects(client, fake_adapter):
    response = client.get("/track/3n3Ppam7vgaVa1iaRUc9Lp", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == DOWNLOAD_URL
    assert fake_adapter.calls == ["3n3Ppam7vgaVa1iaRUc9Lp"]


def test_track_failure_returns_json_error(client, fake_adapter):
    fake_adapter.error = UpstreamError("Spotidown returned error")

    response = client.get("/track/abc", follow_redirects=False)

    assert response.status_code == 500
    assert response.json() == {"error": True, "message": "Spotidown returned error"}


def test_timeouts_are_resolution_failures(client, fake_adapter):
    fake_adapter.error = FetchTimeoutError("Timed out after 60s waiting for POST /action")

    response = client.get("/track/abc", follow_redirects=False)

    assert response.status_code == 500
    assert response.json()["message"].startswith("Timed out")


def test_unexpected_errors_do_not_escape(client, fake_adapter):
    fake_adapter.error = KeyError("boom")

    response = client.get("/track/abc", follow_redirects=False)

    assert response.status_code == 500
    assert response.json()["error"] is True


def test_blank_track_id_is_bad_request(client, fake_adapter):
    response = client.get("/track/%20", follow_redirects=False)

    assert response.status_code == 400
    assert fake_adapter.calls == []


def test_isrc_redirects(client, fake_adapter, fake_catalog):
    response = client.get("/isrc/USIR20400274", follow_redirects=False)

    assert response.status_code == 302
    assert response.headers["location"] == DOWNLOAD_URL
    assert fake_catalog.calls == ["USIR20400274"]
    assert fake_adapter.calls == ["3n3Ppam7vgaVa1iaRUc9Lp"]


def test_isrc_without_match_is_not_found(client, fake_adapter, fake_catalog):
    fake_catalog.track_id = None

    response = client.get("/isrc/XX0000000000", follow_redirects=False)

    assert response.status_code == 404
    assert response.json() == {"error": "No track found"}
    assert fake_adapter.calls == []


def test_isrc_catalog_failure(client, fake_catalog):
    fake_catalog.error = CatalogError("Spotify search failed: invalid client")

    response = client.get("/isrc/USIR20400274", follow_redirects=False)

    assert response.status_code == 500
    assert response.json()["message"] == "Spotify search failed: invalid client"


def test_resolve_returns_json(client, fake_adapter):
    response = client.get(
        "/resolve", params={"url": "https://open.spotify.com/track/3n3Ppam7vgaVa1iaRUc9Lp?si=x"}
    )

    assert response.status_code == 200
    assert response.json() == {
        "url": DOWNLOAD_URL,
        "name": "Mr. Brightside",
        "artist": "The Killers",
    }
    assert fake_adapter.calls == ["3n3Ppam7vgaVa1iaRUc9Lp"]


def test_resolve_accepts_bare_id(client, fake_adapter):
    client.get("/resolve", params={"url": "3n3Ppam7vgaVa1iaRUc9Lp"})
    assert fake_adapter.calls == ["3n3Ppam7vgaVa1iaRUc9Lp"]


def test_resolve_missing_url(client, fake_adapter):
    response = client.get("/resolve")

    assert response.status_code == 400
    assert response.json() == {"error": "Missing 'url' query parameter"}
    assert fake_adapter.calls == []


def test_resolve_failure(client, fake_adapter):
    fake_adapter.error = UpstreamError("Invalid JSON from Spotidown")

    response = client.get("/resolve", params={"url": "abc"})

    assert response.status_code == 500
    assert response.json() == {"error": True, "message": "Invalid JSON from Spotidown"}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["ready"] is False
    assert body["landing_url"] == "https://spotidown.app/"


def test_startup_boots_session_and_shutdown_closes(manager, session_factory, fake_adapter, fake_catalog):
    app = create_app(sessions=manager, adapter=fake_adapter, catalog=fake_catalog)

    with TestClient(app) as client:
        assert client.get("/health").json()["ready"] is True

    assert session_factory.created[0].stopped
