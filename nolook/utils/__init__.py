"""Utility modules."""

from nolook.utils.datetime import as_utc, utc_now
from nolook.utils.exceptions import (
    AnalysisError,
    ConfigurationError,
    DownloadError,
    NoLookException,
    NotFoundError,
    PipelineError,
    TranscriptionError,
)

__all__ = [
    "as_utc",
    "utc_now",
    "AnalysisError",
    "ConfigurationError",
    "DownloadError",
    "NoLookException",
    "NotFoundError",
    "PipelineError",
    "TranscriptionError",
]
