"""HTTP server for spotidown-proxy.

Endpoints:
    GET /track/{track_id}   302 to the MP3 download URL
    GET /isrc/{isrc}        same, after looking the ISRC up on Spotify
    GET /resolve?url=...    JSON {url, name, artist} for a Spotify URL or id
    GET /health             state of the shared browser session
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

from ..browser import SessionManager, session_manager
from ..catalog import SpotifyCatalog, extract_track_id
from ..config import settings
from ..exceptions import InvalidRequestError, SpotidownError, TrackNotFoundError
from ..sites import SpotidownAdapter
from ..tracks import ErrorResponse, ResolutionResult, SessionInfo

logger = logging.getLogger(__name__)


def _error_response(exc: Exception) -> JSONResponse:
    """Map an exception raised while serving a request onto a JSON body."""
    if isinstance(exc, InvalidRequestError):
        return JSONResponse({"error": str(exc)}, status_code=400)
    if isinstance(exc, TrackNotFoundError):
        return JSONResponse({"error": str(exc)}, status_code=404)
    if not isinstance(exc, SpotidownError):
        logger.exception("Unexpected error while handling request")
    return JSONResponse(ErrorResponse(message=str(exc)).model_dump(), status_code=500)


def create_app(
    sessions: SessionManager | None = None,
    adapter: SpotidownAdapter | None = None,
    catalog: SpotifyCatalog | None = None,
    boot_session: bool = True,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        sessions: Shared session manager (default: global instance)
        adapter: Resolver for track ids (default: SpotidownAdapter on ``sessions``)
        catalog: ISRC lookup client (default: SpotifyCatalog from settings)
        boot_session: Start the browser during application startup
    """
    sessions = sessions or session_manager
    adapter = adapter or SpotidownAdapter(sessions)
    catalog = catalog or SpotifyCatalog()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if boot_session:
            try:
                await sessions.start()
            except Exception:
                logger.exception("Failed to initialize browser/page")
                raise
        logger.info(f"Spotidown proxy server running at http://{settings.host}:{settings.port}")
        try:
            yield
        finally:
            await sessions.close()

    app = FastAPI(title="spotidown-proxy", lifespan=lifespan)
    app.state.sessions = sessions
    app.state.adapter = adapter
    app.state.catalog = catalog

    @app.get("/track/{track_id}")
    async def track_redirect(track_id: str, request: Request):
        """Redirect to the download URL of a Spotify track."""
        try:
            if not track_id.strip():
                raise InvalidRequestError("Track ID is required")
            result = await request.app.state.adapter.resolve(track_id)
        except Exception as e:
            return _error_response(e)
        return RedirectResponse(result.url, status_code=302)

    @app.get("/isrc/{isrc}")
    async def isrc_redirect(isrc: str, request: Request):
        """Look up an ISRC on Spotify and redirect to its download URL."""
        try:
            if not isrc.strip():
                raise InvalidRequestError("ISRC is required")
            track_id = await request.app.state.catalog.find_track_id_async(isrc.strip())
            if not track_id:
                raise TrackNotFoundError("No track found")
            result = await request.app.state.adapter.resolve(track_id)
        except Exception as e:
            return _error_response(e)
        return RedirectResponse(result.url, status_code=302)

    @app.get("/resolve", response_model=ResolutionResult)
    async def resolve(request: Request, url: str | None = None):
        """Resolve a Spotify track URL (or bare id) to download metadata."""
        try:
            if not url or not url.strip():
                raise InvalidRequestError("Missing 'url' query parameter")
            result = await request.app.state.adapter.resolve(extract_track_id(url))
        except Exception as e:
            return _error_response(e)
        return result

    @app.get("/health", response_model=SessionInfo)
    async def health(request: Request):
        return request.app.state.sessions.info()

    return app


app = create_app()


def main():
    """Entry point for the HTTP server."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
