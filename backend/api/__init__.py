"""
Xelma API package.

Provides the FastAPI application for wallet challenge-response authentication.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
