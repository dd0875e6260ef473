"""Application factory for the FastAPI backend."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from .. import logging_manager
from ..words.status import StatusTransitionError
from .dependencies import get_container
from .routes import session_router, word_router

logger = logging_manager.get_logger().getChild("webapi")


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StatusTransitionError)
    async def _status_transition_handler(
        request: Request, exc: StatusTransitionError
    ) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})


def create_app(*, start_workers: bool = False) -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    app = FastAPI(title="word-enrichment API", version="0.1.0")
    _register_exception_handlers(app)

    @app.on_event("startup")
    async def _start_consumers() -> None:
        if not start_workers:
            return
        container = app.dependency_overrides.get(get_container, get_container)()
        container.runner.start()

    @app.on_event("shutdown")
    async def _stop_runtime() -> None:
        if get_container.cache_info().currsize == 0:
            return
        try:
            get_container().shutdown(wait=False)
        except Exception:  # pragma: no cover
            logger.exception("Failed to shut down pipeline container")

    @app.get("/_health", tags=["health"])
    def healthcheck() -> dict[str, str]:
        """Simple healthcheck endpoint for smoke-testing the server."""

        return {"status": "ok"}

    app.include_router(word_router, prefix="/api/words", tags=["words"])
    app.include_router(session_router, prefix="/api/sessions", tags=["sessions"])
    return app


def create_app_with_workers() -> FastAPI:
    """Build the application and run the stream consumers alongside it."""

    return create_app(start_workers=True)


__all__ = ["create_app", "create_app_with_workers"]
