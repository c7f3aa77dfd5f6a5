"""Application configuration using Pydantic Settings."""

import logging
import warnings

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_NOTE_CATEGORIES: dict[str, list[str]] = {
    "pain": ["painIntensity"],
    "activity": ["screenType", "activityDurationMinutes"],
    "other": [],
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # App
    app_name: str = "NoLook"
    debug: bool = True
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    # Note ledger
    database_url: str = "sqlite:///./nolook.db"

    # Artifact store (filesystem adapter)
    storage_dir: str = "./storage"
    recordings_prefix: str = "recordings"

    # OpenAI-compatible services. The key is read at call time, so a missing
    # key fails the first pipeline run rather than startup.
    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    transcription_model: str = "whisper-1"
    analysis_model: str = "gpt-4o-mini"
    analysis_max_tokens: int = 2000
    request_timeout_seconds: float = 120.0

    # Wall-clock budget for one pipeline invocation
    pipeline_timeout_seconds: float = 300.0

    # Closed category set mapped to the extracted fields each one supports
    note_categories: dict[str, list[str]] = DEFAULT_NOTE_CATEGORIES

    # CORS
    cors_origins: list[str] = ["*"]

    def __init__(self, **kwargs):
        """Initialize settings and validate production configuration."""
        super().__init__(**kwargs)
        self._validate_production_settings()

    def _validate_production_settings(self) -> None:
        """Warn about insecure or incomplete production settings."""
        if not self.debug:
            if "*" in self.cors_origins:
                warnings.warn(
                    "CORS is configured to allow all origins (*). Restrict this in production!",
                    UserWarning,
                    stacklevel=2,
                )
                logger.warning(
                    "CORS is configured to allow all origins (*). Restrict this in production!"
                )

            if not self.openai_api_key:
                logger.warning(
                    "OPENAI_API_KEY is not set. Recordings will fail until it is configured."
                )


settings = Settings()
