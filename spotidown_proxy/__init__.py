"""spotidown-proxy - Spotify track to MP3 download URL through a shared headless browser."""

__version__ = "0.1.0"
