"""Pytest configuration and fixtures."""

import asyncio
import json
from collections.abc import Generator, Mapping
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, create_engine
from sqlmodel.pool import StaticPool

from nolook.api.deps import Services
from nolook.main import create_app
from nolook.repositories.note_ledger import SqlNoteLedger
from nolook.schemas.events import StorageEvent
from nolook.services.storage import LocalArtifactStore
from nolook.tasks.ingestion import IngestionPipeline
from nolook.utils.events import NoteChangeFeed

# Use in-memory SQLite for tests
TEST_DATABASE_URL = "sqlite://"

PHONE_TRANSCRIPT = "I have been looking at my phone for thirty minutes"

ACTIVITY_REPLY = json.dumps(
    {
        "category": "activity",
        "summary": "I have been looking at my phone for thirty minutes.",
        "painIntensity": None,
        "screenType": "phone",
        "activityDurationMinutes": 30,
    }
)

RECORDING_NAME = "recordings/u123/n456.m4a"


class FakeTranscriber:
    """Transcription collaborator returning a canned transcript."""

    def __init__(self, transcript: str = PHONE_TRANSCRIPT):
        self.transcript = transcript
        self.error: Exception | None = None
        self.calls: list[Path] = []
        self.received: list[bytes] = []

    async def transcribe(self, audio_path: Path) -> str:
        self.calls.append(audio_path)
        self.received.append(audio_path.read_bytes())
        # Yield so concurrent runs interleave
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.transcript


class FakeAnalyzer:
    """Analysis collaborator returning a canned reply."""

    def __init__(self, reply: str = ACTIVITY_REPLY):
        self.reply = reply
        self.error: Exception | None = None
        self.delay: float = 0
        self.calls: list[str] = []

    async def analyze(self, transcript: str) -> str:
        self.calls.append(transcript)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply


class RecordingLedger:
    """Wraps the SQL ledger, keeping every attempted merge-write in order."""

    def __init__(self, inner: SqlNoteLedger):
        self.inner = inner
        self.writes: list[tuple[str, str, dict[str, Any]]] = []
        self.fail_when = None

    async def merge_write(self, owner_id: str, note_id: str, data: Mapping[str, Any]):
        self.writes.append((owner_id, note_id, dict(data)))
        if self.fail_when is not None and self.fail_when(data):
            raise RuntimeError("ledger unavailable")
        return await self.inner.merge_write(owner_id, note_id, data)

    async def get(self, owner_id: str, note_id: str):
        return await self.inner.get(owner_id, note_id)

    async def list_notes(self, owner_id: str, skip: int = 0, limit: int = 50):
        return await self.inner.list_notes(owner_id, skip=skip, limit=limit)

    async def delete(self, owner_id: str, note_id: str) -> bool:
        return await self.inner.delete(owner_id, note_id)

    @property
    def statuses(self) -> list[str]:
        return [data["status"] for _, _, data in self.writes if "status" in data]


@pytest.fixture(name="engine")
def engine_fixture():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine


@pytest.fixture(name="feed")
def feed_fixture() -> NoteChangeFeed:
    return NoteChangeFeed()


@pytest.fixture(name="sql_ledger")
def sql_ledger_fixture(engine, feed) -> SqlNoteLedger:
    return SqlNoteLedger(engine, feed=feed)


@pytest.fixture(name="ledger")
def ledger_fixture(sql_ledger) -> RecordingLedger:
    return RecordingLedger(sql_ledger)


@pytest.fixture(name="artifacts")
def artifacts_fixture(tmp_path) -> LocalArtifactStore:
    return LocalArtifactStore(tmp_path / "storage")


@pytest.fixture(name="transcriber")
def transcriber_fixture() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture(name="analyzer")
def analyzer_fixture() -> FakeAnalyzer:
    return FakeAnalyzer()


@pytest.fixture(name="pipeline")
def pipeline_fixture(ledger, artifacts, transcriber, analyzer) -> IngestionPipeline:
    return IngestionPipeline(
        ledger=ledger,
        artifacts=artifacts,
        transcriber=transcriber,
        analyzer=analyzer,
    )


@pytest.fixture(name="recording_event")
def recording_event_fixture(artifacts) -> StorageEvent:
    """Store a recording and return its finalize event."""
    return asyncio.run(artifacts.upload(RECORDING_NAME, b"fake-m4a-bytes", "audio/m4a"))


@pytest.fixture(name="client")
def client_fixture(ledger, artifacts, pipeline, feed) -> Generator[TestClient, None, None]:
    """Create a test client wired to the fake collaborators."""
    services = Services(ledger=ledger, artifacts=artifacts, pipeline=pipeline, feed=feed)
    with TestClient(create_app(services)) as client:
        yield client
