"""Storage finalize events and recording path matching."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


class StorageEvent(BaseModel):
    """Finalize notification for a fully written storage object."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    content_type: str | None = Field(default=None, alias="contentType")


@dataclass(frozen=True)
class RecordingRef:
    """A qualifying recording, resolved to its note address."""

    owner_id: str
    note_id: str
    audio_path: str

    @property
    def ledger_path(self) -> str:
        return f"users/{self.owner_id}/notes/{self.note_id}"


@dataclass(frozen=True)
class NotApplicable:
    """An event that is not a recording. Not an error."""

    reason: str


def match_recording(
    event: StorageEvent, recordings_prefix: str = "recordings"
) -> RecordingRef | NotApplicable:
    """
    Resolve a storage event to the recording it announces.

    Only objects named ``{recordings_prefix}/{ownerId}/{fileName}`` with an
    ``audio/`` content type qualify. The note id is the file name without
    its extension, so the same object always maps to the same note.

    Args:
        event: Storage finalize event
        recordings_prefix: Top-level namespace holding recordings

    Returns:
        RecordingRef for qualifying events, NotApplicable otherwise
    """
    name = event.name
    if not name:
        return NotApplicable("event has no object name")

    parts = name.split("/")
    if parts[0] != recordings_prefix:
        return NotApplicable(f"not a recording: {name}")

    if not event.content_type or not event.content_type.startswith("audio/"):
        return NotApplicable(f"not an audio file: {event.content_type}")

    if len(parts) != 3 or not all(parts):
        return NotApplicable(f"invalid path structure: {name}")

    owner_id, file_name = parts[1], parts[2]
    stem, dot, _ = file_name.rpartition(".")
    note_id = stem if dot else file_name
    # ".m4a" has no id left once the extension is gone
    if not note_id:
        return NotApplicable(f"file name has no id: {name}")

    return RecordingRef(owner_id=owner_id, note_id=note_id, audio_path=name)
