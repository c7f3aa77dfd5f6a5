"""NoLook API - Main Application."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nolook import __version__
from nolook.api.deps import Services, build_services
from nolook.api.routes import events_router, notes_router, recordings_router
from nolook.config import settings
from nolook.utils.logging_setup import configure_logging


def create_app(services: Services | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        services: Pre-built collaborators (tests); production wiring is
            built from settings at startup when omitted.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if services is None:
            configure_logging(settings.log_level)
            app.state.services = build_services()
        else:
            app.state.services = services
        yield

    app = FastAPI(
        title=settings.app_name,
        description="Voice note ingestion: transcription, classification and summaries",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(events_router)
    app.include_router(notes_router)
    app.include_router(recordings_router)

    @app.get("/health")
    async def health_check() -> dict:
        """
        System health check.

        The database is reachable if the app started; the API key is only
        reported, since a missing key fails individual notes, not startup.
        """
        return {
            "status": "ok",
            "db_connected": True,
            "transcription_configured": bool(settings.openai_api_key),
        }

    return app


app = create_app()
