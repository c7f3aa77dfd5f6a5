"""Recording upload endpoint."""

import logging
import uuid
from pathlib import PurePosixPath
from typing import Annotated

from fastapi import (
    APIRouter,
    BackgroundTasks,
    File,
    HTTPException,
    UploadFile,
    status,
)

from nolook.api.deps import ServicesDep
from nolook.models.note import NoteStatus
from nolook.schemas.note import NoteResponse
from nolook.tasks.ingestion import run_ingestion

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users/{owner_id}/recordings", tags=["recordings"])


@router.post("", response_model=NoteResponse, status_code=status.HTTP_202_ACCEPTED)
async def upload_recording(
    owner_id: str,
    audio_file: Annotated[UploadFile, File(description="Recorded audio")],
    services: ServicesDep,
    background_tasks: BackgroundTasks,
) -> NoteResponse:
    """
    Store a recording and queue it for processing.

    The note is written immediately with 'uploaded' status; storing the
    object raises the finalize event that the pipeline handles in the
    background. Watch the note (or the event stream) for progress.
    """
    content_type = audio_file.content_type or ""
    if not content_type.startswith("audio/"):
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail=f"Expected an audio upload, got '{content_type or 'unknown'}'",
        )

    content = await audio_file.read()
    extension = PurePosixPath(audio_file.filename or "audio.m4a").suffix or ".m4a"
    note_id = str(uuid.uuid4())
    object_name = (
        f"{services.pipeline.recordings_prefix}/{owner_id}/{note_id}{extension}"
    )

    try:
        event = await services.artifacts.upload(object_name, content, content_type)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from e

    document = await services.ledger.merge_write(
        owner_id,
        note_id,
        {"status": NoteStatus.UPLOADED.value, "audioPath": object_name},
    )
    logger.info(f"Queued recording {object_name} for processing")

    background_tasks.add_task(run_ingestion, services.pipeline, event)
    return NoteResponse.model_validate(document)
