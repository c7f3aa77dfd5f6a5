"""API dependencies for dependency injection."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request

from nolook.database import create_db_and_tables, engine
from nolook.repositories.note_ledger import NoteLedger, SqlNoteLedger
from nolook.services.analysis_service import OpenAIAnalysisService
from nolook.services.storage import ArtifactStore, LocalArtifactStore
from nolook.services.transcription_service import OpenAITranscriptionService
from nolook.tasks.ingestion import IngestionPipeline
from nolook.utils.events import NoteChangeFeed


@dataclass
class Services:
    """Collaborator handles built once per process and shared by all requests."""

    ledger: NoteLedger
    artifacts: ArtifactStore
    pipeline: IngestionPipeline
    feed: NoteChangeFeed


def build_services() -> Services:
    """Wire the production collaborators from settings."""
    create_db_and_tables()
    feed = NoteChangeFeed()
    ledger = SqlNoteLedger(engine, feed=feed)
    artifacts = LocalArtifactStore()
    artifacts.root.mkdir(parents=True, exist_ok=True)
    pipeline = IngestionPipeline(
        ledger=ledger,
        artifacts=artifacts,
        transcriber=OpenAITranscriptionService(),
        analyzer=OpenAIAnalysisService(),
    )
    return Services(ledger=ledger, artifacts=artifacts, pipeline=pipeline, feed=feed)


def get_services(request: Request) -> Services:
    """Get the process-wide collaborators."""
    return request.app.state.services


ServicesDep = Annotated[Services, Depends(get_services)]


def get_ledger(services: ServicesDep) -> NoteLedger:
    return services.ledger


def get_pipeline(services: ServicesDep) -> IngestionPipeline:
    return services.pipeline


LedgerDep = Annotated[NoteLedger, Depends(get_ledger)]
PipelineDep = Annotated[IngestionPipeline, Depends(get_pipeline)]
