"""Transcription service using an OpenAI-compatible speech-to-text API."""

import logging
from pathlib import Path
from typing import Protocol

import httpx

from nolook.config import settings
from nolook.utils.exceptions import ConfigurationError, TranscriptionError

logger = logging.getLogger(__name__)


class TranscriptionService(Protocol):
    """Turns a local audio file into plain text."""

    async def transcribe(self, audio_path: Path) -> str: ...


def error_detail(response: httpx.Response) -> str:
    """Pull the human-readable message out of an OpenAI-style error response."""
    try:
        error = response.json().get("error")
    except (ValueError, AttributeError):
        error = None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    return f"HTTP {response.status_code}: {response.text[:200]}"


class OpenAITranscriptionService:
    """Service for audio transcription through the /audio/transcriptions endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize transcription service.

        Args:
            api_key: API key (default read from settings at call time)
            base_url: API base URL including the version prefix
            model: Speech-to-text model to use
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self._api_key = api_key
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.model = model or settings.transcription_model
        self.timeout = timeout or settings.request_timeout_seconds
        self._transport = transport

    @property
    def api_key(self) -> str:
        key = self._api_key or settings.openai_api_key
        if not key:
            raise ConfigurationError("OPENAI_API_KEY is not configured")
        return key

    async def transcribe(self, audio_path: Path) -> str:
        """
        Transcribe an audio file to text.

        Args:
            audio_path: Path to the audio file

        Returns:
            Transcribed text

        Raises:
            ConfigurationError: If no API key is available
            TranscriptionError: If the call fails or returns no text
        """
        headers = {"Authorization": f"Bearer {self.api_key}"}

        async with httpx.AsyncClient(
            transport=self._transport, timeout=self.timeout
        ) as client:
            try:
                with open(audio_path, "rb") as audio_file:
                    response = await client.post(
                        f"{self.base_url}/audio/transcriptions",
                        headers=headers,
                        data={"model": self.model, "response_format": "text"},
                        files={"file": (audio_path.name, audio_file)},
                    )
            except httpx.HTTPError as e:
                raise TranscriptionError(f"Transcription request failed: {e}") from e

        if response.is_error:
            raise TranscriptionError(
                f"Transcription service error: {error_detail(response)}"
            )

        transcript = response.text.strip()
        if not transcript:
            raise TranscriptionError("Transcription service returned an empty transcript")
        return transcript
