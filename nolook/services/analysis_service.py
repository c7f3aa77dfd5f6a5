"""Analysis service: classification, summary and field extraction in one call."""

import logging
from typing import Protocol

import httpx

from nolook.config import settings
from nolook.services.transcription_service import error_detail
from nolook.utils.exceptions import AnalysisError, ConfigurationError

logger = logging.getLogger(__name__)

ANALYSIS_INSTRUCTION = """You analyze voice note transcriptions for a health tracking app focused on eye strain and screen usage.

Your tasks:
1. CLASSIFY the recording into exactly one category:
   - "pain": reports of pain or discomfort (e.g. "my eyes hurt", "I have a headache", "feeling strain")
   - "activity": reports of screen-related activities (e.g. "I looked at my phone for 30 minutes", "worked on the computer for 2 hours", "watched TV")
   - "other": anything that does not fit the categories above

2. SUMMARIZE the content: clean up the transcription by fixing grammar, removing filler words (um, uh, like) and organizing it clearly. Keep it detailed; do not shorten it significantly.

3. For PAIN reports:
   - painIntensity on a 1-5 scale (1=mild, 2=noticeable, 3=moderate, 4=severe, 5=extreme). Infer it from context if not stated.

4. For ACTIVITY reports:
   - screenType: "phone", "computer" (includes laptop/desktop), "tv", or "other"
   - activityDurationMinutes: duration in minutes if mentioned, otherwise null

Fields that do not apply to the category must be null.

Respond with only a JSON object:
{
  "category": "pain" | "activity" | "other",
  "summary": "cleaned up transcription...",
  "painIntensity": number (1-5) | null,
  "screenType": "phone" | "computer" | "tv" | "other" | null,
  "activityDurationMinutes": number | null
}"""


class AnalysisService(Protocol):
    """Returns the raw structured reply for a transcript."""

    async def analyze(self, transcript: str) -> str: ...


class OpenAIAnalysisService:
    """Service for transcript analysis through the /chat/completions endpoint."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
        instruction: str = ANALYSIS_INSTRUCTION,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the analysis service.

        Args:
            api_key: API key (default read from settings at call time)
            base_url: API base URL including the version prefix
            model: Chat model to use
            max_tokens: Completion token limit
            timeout: Request timeout in seconds
            instruction: System instruction sent with every transcript
            transport: Optional httpx transport (used by tests)
        """
        self._api_key = api_key
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.model = model or settings.analysis_model
        self.max_tokens = max_tokens or settings.analysis_max_tokens
        self.timeout = timeout or settings.request_timeout_seconds
        self.instruction = instruction
        self._transport = transport

    @property
    def api_key(self) -> str:
        key = self._api_key or settings.openai_api_key
        if not key:
            raise ConfigurationError("OPENAI_API_KEY is not configured")
        return key

    def _get_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def analyze(self, transcript: str) -> str:
        """
        Ask the model to classify, summarize and extract fields.

        Args:
            transcript: Plain-text transcript

        Returns:
            The model's reply, expected to be a JSON object

        Raises:
            ConfigurationError: If no API key is available
            AnalysisError: If the call fails or the reply has no content
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.instruction},
                {"role": "user", "content": transcript},
            ],
            "max_tokens": self.max_tokens,
            "response_format": {"type": "json_object"},
        }

        async with httpx.AsyncClient(
            transport=self._transport, timeout=self.timeout
        ) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers=self._get_headers(),
                    json=payload,
                )
            except httpx.HTTPError as e:
                raise AnalysisError(f"Analysis request failed: {e}") from e

        if response.is_error:
            raise AnalysisError(f"Analysis service error: {error_detail(response)}")

        try:
            data = response.json()
        except ValueError as e:
            raise AnalysisError("Analysis service returned a non-JSON response") from e

        choices = data.get("choices") if isinstance(data, dict) else None
        if not choices:
            raise AnalysisError("Analysis response missing choices")

        content = (choices[0].get("message") or {}).get("content")
        if not content:
            raise AnalysisError("Analysis response has no content")
        return str(content)
