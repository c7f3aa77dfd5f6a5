"""Pydantic schemas for request/response validation."""

from nolook.schemas.events import (
    NotApplicable,
    RecordingRef,
    StorageEvent,
    match_recording,
)
from nolook.schemas.note import IngestionResponse, NoteListResponse, NoteResponse

__all__ = [
    "NotApplicable",
    "RecordingRef",
    "StorageEvent",
    "match_recording",
    "IngestionResponse",
    "NoteListResponse",
    "NoteResponse",
]
