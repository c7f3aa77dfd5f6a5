"""Service modules for the external collaborators."""

from nolook.services.analysis_parser import ParsedAnalysis, Unparseable, parse_analysis
from nolook.services.analysis_service import AnalysisService, OpenAIAnalysisService
from nolook.services.storage import ArtifactStore, LocalArtifactStore
from nolook.services.transcription_service import (
    OpenAITranscriptionService,
    TranscriptionService,
)

__all__ = [
    "ParsedAnalysis",
    "Unparseable",
    "parse_analysis",
    "AnalysisService",
    "OpenAIAnalysisService",
    "ArtifactStore",
    "LocalArtifactStore",
    "OpenAITranscriptionService",
    "TranscriptionService",
]
