"""Note schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class NoteResponse(BaseModel):
    """A note document as clients read it.

    Category-specific fields (painIntensity, screenType, ...) are carried as
    extra keys, so the field set stays open.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )

    id: str
    owner_id: str
    status: str
    audio_path: str | None = None
    transcription: str | None = None
    summary: str | None = None
    category: str | None = None
    error: str | None = None
    created_at: datetime
    updated_at: datetime


class NoteListResponse(BaseModel):
    """Schema for paginated note list."""

    notes: list[NoteResponse]
    total: int


class IngestionResponse(BaseModel):
    """Result of handling one storage event."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: Literal["skipped", "complete"]
    reason: str | None = None
    owner_id: str | None = None
    note_id: str | None = None
