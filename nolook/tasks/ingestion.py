"""Ingestion pipeline: recording -> transcript -> analysis -> complete note."""

import asyncio
import logging
import os
import tempfile
from collections.abc import AsyncIterator, Callable, Mapping
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path, PurePosixPath
from typing import Any, Literal

from nolook.config import settings
from nolook.models.note import NoteStatus
from nolook.repositories.note_ledger import NoteLedger
from nolook.schemas.events import NotApplicable, RecordingRef, StorageEvent, match_recording
from nolook.services.analysis_parser import Unparseable, parse_analysis
from nolook.services.analysis_service import AnalysisService
from nolook.services.storage import ArtifactStore
from nolook.services.transcription_service import TranscriptionService
from nolook.utils.datetime import utc_now
from nolook.utils.exceptions import AnalysisError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngestionOutcome:
    """What one pipeline invocation did. Failures are raised, not returned."""

    status: Literal["skipped", "complete"]
    reason: str | None = None
    owner_id: str | None = None
    note_id: str | None = None
    document: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def skipped(cls, reason: str) -> "IngestionOutcome":
        return cls(status="skipped", reason=reason)


class _RunClock:
    """Timestamps for one invocation, strictly increasing even if the wall clock stalls."""

    def __init__(self, now: Callable[[], datetime]):
        self._now = now
        self._last: datetime | None = None

    def tick(self) -> datetime:
        current = self._now()
        if self._last is not None and current <= self._last:
            current = self._last + timedelta(microseconds=1)
        self._last = current
        return current


def _describe(error: BaseException) -> str:
    return str(error) or error.__class__.__name__


class IngestionPipeline:
    """Drives one recording through transcribing -> analyzing -> complete.

    Holds only collaborator handles, so a single instance can serve any
    number of concurrent invocations.
    """

    def __init__(
        self,
        ledger: NoteLedger,
        artifacts: ArtifactStore,
        transcriber: TranscriptionService,
        analyzer: AnalysisService,
        categories: Mapping[str, list[str]] | None = None,
        recordings_prefix: str | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize the pipeline.

        Args:
            ledger: Note ledger receiving every state transition
            artifacts: Artifact store holding the recordings
            transcriber: Speech-to-text collaborator
            analyzer: Classification/summary collaborator
            categories: Closed category set (default from settings)
            recordings_prefix: Namespace of qualifying objects (default from settings)
            clock: Source of timestamps
        """
        self.ledger = ledger
        self.artifacts = artifacts
        self.transcriber = transcriber
        self.analyzer = analyzer
        self.categories = dict(categories or settings.note_categories)
        self.recordings_prefix = recordings_prefix or settings.recordings_prefix
        self.clock = clock

    async def handle(self, event: StorageEvent) -> IngestionOutcome:
        """
        Process one storage finalize event.

        Non-recording events return a skipped outcome without touching the
        ledger. Any failure after that is recorded on the note as
        ``status=error`` and then re-raised for the host to retry or alert.

        Args:
            event: Storage finalize event

        Returns:
            IngestionOutcome describing a skip or a completed note
        """
        match = match_recording(event, self.recordings_prefix)
        if isinstance(match, NotApplicable):
            logger.info(f"Skipping storage event: {match.reason}")
            return IngestionOutcome.skipped(match.reason)

        recording = match
        clock = _RunClock(self.clock)
        logger.info(
            f"Processing recording for user {recording.owner_id}, note {recording.note_id}"
        )

        try:
            return await self._run(recording, clock)
        except Exception as e:
            logger.exception(f"Processing failed for {recording.ledger_path}: {e}")
            await self._record_failure(recording, e, clock)
            raise

    async def _run(self, recording: RecordingRef, clock: _RunClock) -> IngestionOutcome:
        owner_id, note_id = recording.owner_id, recording.note_id

        await self.ledger.merge_write(
            owner_id,
            note_id,
            {
                "status": NoteStatus.TRANSCRIBING.value,
                "audioPath": recording.audio_path,
                "error": None,
                "updatedAt": clock.tick(),
            },
        )

        async with self._local_copy(recording.audio_path) as local_path:
            transcript = await self.transcriber.transcribe(local_path)
        logger.info(f"Transcription complete: {transcript[:100]}...")

        await self.ledger.merge_write(
            owner_id,
            note_id,
            {
                "transcription": transcript,
                "status": NoteStatus.ANALYZING.value,
                "updatedAt": clock.tick(),
            },
        )

        reply = await self.analyzer.analyze(transcript)
        analysis = parse_analysis(reply, self.categories)
        if isinstance(analysis, Unparseable):
            logger.warning(f"Unusable analysis reply: {analysis.raw[:200]}")
            raise AnalysisError(analysis.reason)
        logger.info(f"Analysis complete: {analysis.category} - {analysis.summary[:50]}...")

        document = await self.ledger.merge_write(
            owner_id,
            note_id,
            {
                **analysis.to_update(),
                "status": NoteStatus.COMPLETE.value,
                "error": None,
                "updatedAt": clock.tick(),
            },
        )

        logger.info(f"Successfully processed note {recording.ledger_path}")
        return IngestionOutcome(
            status="complete", owner_id=owner_id, note_id=note_id, document=document
        )

    async def _record_failure(
        self, recording: RecordingRef, error: Exception, clock: _RunClock
    ) -> None:
        """Best-effort error write; never replaces the original failure."""
        try:
            await self.ledger.merge_write(
                recording.owner_id,
                recording.note_id,
                {
                    "status": NoteStatus.ERROR.value,
                    "error": _describe(error),
                    "updatedAt": clock.tick(),
                },
            )
        except Exception as write_error:
            logger.error(
                f"Failed to record error state for {recording.ledger_path}: {write_error}"
            )

    @asynccontextmanager
    async def _local_copy(self, audio_path: str) -> AsyncIterator[Path]:
        """Download an artifact to a private temp file, removed on exit."""
        suffix = PurePosixPath(audio_path).suffix
        fd, temp_name = tempfile.mkstemp(prefix="nolook-", suffix=suffix)
        os.close(fd)
        local_path = Path(temp_name)
        try:
            await self.artifacts.download(audio_path, local_path)
            logger.debug(f"Downloaded {audio_path} to {local_path}")
            yield local_path
        finally:
            local_path.unlink(missing_ok=True)


async def run_ingestion(
    pipeline: IngestionPipeline, event: StorageEvent, timeout: float | None = None
) -> IngestionOutcome | None:
    """
    Background-task entry point: run the pipeline under the wall-clock budget.

    Failures are already on the note, so they are logged here rather than
    raised into the task runner.
    """
    budget = timeout or settings.pipeline_timeout_seconds
    try:
        return await asyncio.wait_for(pipeline.handle(event), timeout=budget)
    except asyncio.TimeoutError:
        logger.error(f"Processing {event.name} exceeded {budget}s; note left at last status")
    except Exception as e:
        logger.error(f"Processing {event.name} failed: {e}")
    return None
