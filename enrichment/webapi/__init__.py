"""FastAPI surface for word status queries and batch sessions."""

from .application import create_app

__all__ = ["create_app"]
