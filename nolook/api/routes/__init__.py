"""API routes."""

from nolook.api.routes.events import router as events_router
from nolook.api.routes.notes import router as notes_router
from nolook.api.routes.recordings import router as recordings_router

__all__ = ["events_router", "notes_router", "recordings_router"]
