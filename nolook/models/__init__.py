"""Database models."""

from nolook.models.note import COLUMN_FIELDS, NoteDocument, NoteStatus

__all__ = ["COLUMN_FIELDS", "NoteDocument", "NoteStatus"]
