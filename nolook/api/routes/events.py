"""Storage event intake and the note change stream."""

import asyncio
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, HTTPException, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import StreamingResponse
from pydantic import ValidationError

from nolook.api.deps import PipelineDep, ServicesDep
from nolook.config import settings
from nolook.schemas.events import StorageEvent
from nolook.schemas.note import IngestionResponse
from nolook.utils.exceptions import PipelineError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["events"])


def _parse_event(payload: dict[str, Any]) -> StorageEvent:
    # CloudEvents push delivery wraps the object metadata in "data"
    data = payload.get("data")
    body = data if isinstance(data, dict) else payload
    try:
        return StorageEvent.model_validate(body)
    except ValidationError as e:
        raise RequestValidationError(e.errors()) from e


@router.post("/events/storage", response_model=IngestionResponse)
async def handle_storage_event(
    payload: Annotated[dict[str, Any], Body()],
    pipeline: PipelineDep,
) -> IngestionResponse:
    """
    Run the ingestion pipeline for a storage finalize event.

    Non-recording events are acknowledged as skipped. A pipeline failure is
    already recorded on the note and answered with a 5xx so the push
    delivery retries it.
    """
    event = _parse_event(payload)
    try:
        outcome = await asyncio.wait_for(
            pipeline.handle(event), timeout=settings.pipeline_timeout_seconds
        )
    except asyncio.TimeoutError as e:
        logger.error(f"Processing {event.name} exceeded {settings.pipeline_timeout_seconds}s")
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Processing exceeded the time budget",
        ) from e
    except PipelineError as e:
        raise e.to_http_exception() from e

    return IngestionResponse(
        status=outcome.status,
        reason=outcome.reason,
        owner_id=outcome.owner_id,
        note_id=outcome.note_id,
    )


@router.get("/users/{owner_id}/events")
async def note_events(
    owner_id: str,
    services: ServicesDep,
):
    """SSE stream of note changes for one owner."""
    return StreamingResponse(
        services.feed.subscribe(owner_id),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable buffering for Nginx
        },
    )
