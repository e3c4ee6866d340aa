"""API module - HTTP request handlers."""

from .server import app, create_app, main

__all__ = [
    "app",
    "create_app",
    "main",
]
