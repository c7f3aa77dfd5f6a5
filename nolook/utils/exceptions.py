"""Custom exception classes."""

from fastapi import HTTPException, status


class NoLookException(Exception):
    """Base exception for the NoLook service."""

    pass


class NotFoundError(NoLookException):
    """Raised when a resource is not found."""

    def __init__(self, resource: str = "Resource", detail: str | None = None):
        self.detail = detail or f"{resource} not found"
        super().__init__(self.detail)

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=self.detail,
        )


class PipelineError(NoLookException):
    """Raised when a step of the ingestion pipeline fails."""

    def __init__(self, detail: str = "Pipeline step failed"):
        self.detail = detail
        super().__init__(detail)

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=self.detail,
        )


class ConfigurationError(PipelineError):
    """Raised when a required setting is missing at call time."""


class DownloadError(PipelineError):
    """Raised when an artifact cannot be read from the artifact store."""


class TranscriptionError(PipelineError):
    """Raised when the transcription service fails or returns nothing usable."""


class AnalysisError(PipelineError):
    """Raised when the analysis service fails or its reply cannot be parsed."""
