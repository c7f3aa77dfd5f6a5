"""Note document model."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import JSON, Column, DateTime, Index
from sqlmodel import Field, SQLModel

from nolook.utils.datetime import as_utc, utc_now


class NoteStatus(StrEnum):
    """Lifecycle states of a note. COMPLETE and ERROR are terminal."""

    UPLOADED = "uploaded"
    TRANSCRIBING = "transcribing"
    ANALYZING = "analyzing"
    COMPLETE = "complete"
    ERROR = "error"


# Wire (document) field name -> column attribute
COLUMN_FIELDS: dict[str, str] = {
    "status": "status",
    "audioPath": "audio_path",
    "transcription": "transcription",
    "summary": "summary",
    "category": "category",
    "error": "error",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


class NoteDocument(SQLModel, table=True):  # type: ignore
    """One note per recording, addressed as users/{owner_id}/notes/{id}."""

    __tablename__ = "notes"  # type: ignore

    owner_id: str = Field(primary_key=True)
    id: str = Field(primary_key=True)

    status: str = Field(default=NoteStatus.UPLOADED.value, index=True)
    audio_path: str | None = Field(default=None)

    # Content
    transcription: str | None = Field(default=None)
    summary: str | None = Field(default=None)
    category: str | None = Field(default=None)

    # Category-specific extracted values (open, nullable set)
    extracted_fields: dict[str, Any] = Field(
        default_factory=dict, sa_column=Column(JSON)
    )

    error: str | None = Field(default=None)

    # Timestamps
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    __table_args__ = (Index("ix_notes_owner_created", "owner_id", "created_at"),)

    def to_document(self) -> dict[str, Any]:
        """Render the note the way clients read it (camelCase, fields flattened)."""
        document: dict[str, Any] = {"id": self.id, "ownerId": self.owner_id}
        for wire_name, attribute in COLUMN_FIELDS.items():
            document[wire_name] = getattr(self, attribute)
        # SQLite drivers differ on whether stored offsets come back
        document["createdAt"] = as_utc(self.created_at)
        document["updatedAt"] = as_utc(self.updated_at)
        for key, value in (self.extracted_fields or {}).items():
            document.setdefault(key, value)
        return document
