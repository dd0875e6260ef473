"""HTTP routers for words and sessions."""

from .session_routes import router as session_router
from .word_routes import router as word_router

__all__ = ["session_router", "word_router"]
