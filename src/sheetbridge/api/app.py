"""FastAPI application factory."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from ..config import settings
from ..errors import SheetBridgeError, public_message, status_for
from . import auth, pixel, routes

logger = logging.getLogger(__name__)


async def sheet_error_handler(request: Request, exc: SheetBridgeError) -> JSONResponse:
    """Render SheetBridge errors as the standard error envelope.

    Failures are already logged where the engine raised them.
    """
    kind = exc.kind
    return JSONResponse(
        status_code=status_for(kind),
        content={"status": "error", "message": public_message(exc, kind)},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.application_name,
        description="Spreadsheet editing and conversion reporting service",
        version="0.1.0",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SessionMiddleware, secret_key=settings.session_secret, same_site="lax")

    app.add_exception_handler(SheetBridgeError, sheet_error_handler)

    prefix = settings.url_prefix.rstrip("/")
    app.include_router(routes.router, prefix=prefix)
    app.include_router(pixel.router, prefix=prefix)
    app.include_router(auth.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "ok",
            "service": "sheetbridge",
            "config": {
                "spreadsheet_configured": bool(settings.spreadsheet_id),
                "google_credentials_configured": settings.resolved_credentials_path.exists(),
                "oauth_configured": settings.oauth_configured,
            },
        }

    logger.info(f"{settings.application_name} application created")
    return app
