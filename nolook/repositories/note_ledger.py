"""Note ledger: per-user note documents with merge-write semantics."""

import logging
from collections.abc import Mapping
from typing import Any, Protocol

from sqlalchemy.engine import Engine
from sqlmodel import Session, func, select

from nolook.models.note import COLUMN_FIELDS, NoteDocument
from nolook.utils.datetime import as_utc, utc_now
from nolook.utils.events import NoteChangeFeed

logger = logging.getLogger(__name__)


class NoteLedger(Protocol):
    """Durable store of note documents keyed by owner and note id."""

    async def merge_write(
        self, owner_id: str, note_id: str, data: Mapping[str, Any]
    ) -> dict[str, Any]: ...

    async def get(self, owner_id: str, note_id: str) -> dict[str, Any] | None: ...

    async def list_notes(
        self, owner_id: str, skip: int = 0, limit: int = 50
    ) -> tuple[list[dict[str, Any]], int]: ...

    async def delete(self, owner_id: str, note_id: str) -> bool: ...


class SqlNoteLedger:
    """Note ledger backed by a SQLModel table.

    Each merge-write runs in its own transaction, so it is atomic on its own;
    nothing wraps a sequence of writes. Keys present in ``data`` overwrite
    (``None`` included), keys absent are left untouched.
    """

    def __init__(self, engine: Engine, feed: NoteChangeFeed | None = None):
        """
        Initialize the ledger.

        Args:
            engine: SQLAlchemy engine holding the notes table
            feed: Optional change feed notified after every write
        """
        self.engine = engine
        self.feed = feed

    async def merge_write(
        self, owner_id: str, note_id: str, data: Mapping[str, Any]
    ) -> dict[str, Any]:
        """
        Partially update a note, creating it on first write.

        Args:
            owner_id: Owning user id
            note_id: Note id
            data: Wire-named fields to write

        Returns:
            The note document after the write
        """
        if "createdAt" in data:
            raise ValueError("createdAt is set by the ledger on first write")

        with Session(self.engine) as session:
            note = session.get(NoteDocument, (owner_id, note_id))
            created = note is None
            if note is None:
                note = NoteDocument(owner_id=owner_id, id=note_id)

            extra = dict(note.extracted_fields or {})
            for key, value in data.items():
                attribute = COLUMN_FIELDS.get(key)
                if attribute is not None:
                    setattr(note, attribute, value)
                else:
                    extra[key] = value
            # Reassign so the JSON column is flagged dirty
            note.extracted_fields = extra

            # Stored in UTC so instants survive drivers that drop the offset
            note.updated_at = as_utc(data.get("updatedAt")) or utc_now()
            if created:
                note.created_at = note.updated_at

            session.add(note)
            session.commit()
            session.refresh(note)
            document = note.to_document()

        logger.debug(f"Merged {sorted(data)} into users/{owner_id}/notes/{note_id}")
        if self.feed is not None:
            await self.feed.publish(owner_id, "note-updated", document)
        return document

    async def get(self, owner_id: str, note_id: str) -> dict[str, Any] | None:
        with Session(self.engine) as session:
            note = session.get(NoteDocument, (owner_id, note_id))
            return note.to_document() if note else None

    async def list_notes(
        self, owner_id: str, skip: int = 0, limit: int = 50
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List an owner's notes, newest first.

        Args:
            owner_id: Owning user id
            skip: Number of records to skip
            limit: Maximum records to return

        Returns:
            Tuple of (note documents, total count)
        """
        with Session(self.engine) as session:
            count_statement = select(func.count()).where(
                NoteDocument.owner_id == owner_id
            )
            total = session.exec(count_statement).one()

            statement = (
                select(NoteDocument)
                .where(NoteDocument.owner_id == owner_id)
                .order_by(NoteDocument.created_at.desc())  # type: ignore
                .offset(skip)
                .limit(limit)
            )
            notes = [note.to_document() for note in session.exec(statement).all()]
        return notes, total

    async def delete(self, owner_id: str, note_id: str) -> bool:
        with Session(self.engine) as session:
            note = session.get(NoteDocument, (owner_id, note_id))
            if note is None:
                return False
            session.delete(note)
            session.commit()

        logger.info(f"Deleted users/{owner_id}/notes/{note_id}")
        if self.feed is not None:
            await self.feed.publish(owner_id, "note-deleted", {"id": note_id})
        return True
