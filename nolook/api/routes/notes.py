"""Read-side note endpoints."""

from typing import Annotated

from fastapi import APIRouter, Query

from nolook.api.deps import LedgerDep, ServicesDep
from nolook.schemas.note import NoteListResponse, NoteResponse
from nolook.utils.exceptions import NotFoundError

router = APIRouter(prefix="/api/users/{owner_id}/notes", tags=["notes"])


@router.get("", response_model=NoteListResponse)
async def list_notes(
    owner_id: str,
    ledger: LedgerDep,
    skip: Annotated[int, Query(ge=0)] = 0,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
) -> NoteListResponse:
    """List an owner's notes, newest first."""
    documents, total = await ledger.list_notes(owner_id, skip=skip, limit=limit)
    return NoteListResponse(
        notes=[NoteResponse.model_validate(document) for document in documents],
        total=total,
    )


@router.get("/{note_id}", response_model=NoteResponse)
async def get_note(owner_id: str, note_id: str, ledger: LedgerDep) -> NoteResponse:
    """Get a single note."""
    document = await ledger.get(owner_id, note_id)
    if document is None:
        raise NotFoundError("Note").to_http_exception()
    return NoteResponse.model_validate(document)


@router.delete("/{note_id}")
async def delete_note(
    owner_id: str,
    note_id: str,
    services: ServicesDep,
    delete_audio: Annotated[bool, Query(alias="deleteAudio")] = False,
) -> dict:
    """
    Delete a note document.

    Deletion does not coordinate with an in-flight pipeline run; a later
    pipeline write re-creates the document.
    """
    document = await services.ledger.get(owner_id, note_id)
    if document is None:
        raise NotFoundError("Note").to_http_exception()

    await services.ledger.delete(owner_id, note_id)

    audio_deleted = False
    if delete_audio and document.get("audioPath"):
        audio_deleted = await services.artifacts.delete(document["audioPath"])

    return {"success": True, "audioDeleted": audio_deleted}
