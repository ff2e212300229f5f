"""
FastAPI application entrypoint for the CV assistant backend.
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cv_assistant.api.routes import router as api_router
from cv_assistant.core.config import get_settings
from cv_assistant.core.errors import MisconfigurationError
from cv_assistant.core.logging import configure_logging

logger = logging.getLogger(__name__)


async def _misconfiguration_handler(request: Request, exc: MisconfigurationError) -> JSONResponse:
    """Dependencies that cannot be built report a misconfiguration, not a crash."""
    logger.error("Misconfiguration while serving %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=HTTPStatus.SERVICE_UNAVAILABLE,
        content={"error": exc.kind, "message": str(exc)},
    )


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    missing = [name for name, state in settings.secret_status().items() if state == "<missing>"]
    if missing:
        logger.warning("Settings without a value: %s", ", ".join(missing))

    app = FastAPI(
        title="CV Assistant",
        version="0.1.0",
        description="Résumé chat, contact messages and 42 profile proxy.",
    )
    app.add_exception_handler(MisconfigurationError, _misconfiguration_handler)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
