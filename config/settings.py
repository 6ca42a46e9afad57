"""Pydantic Settings — typed configuration with .env auto-loading."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from config.llm_config import LLMConfig, ProviderConfig


class Settings(BaseSettings):
    """Application configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Service ──────────────────────────────────────────────
    service_port: int = 7001
    cors_origins: list[str] = ["*"]
    debug: bool = False
    log_level: str = "INFO"
    max_body_bytes: int = 50 * 1024 * 1024  # inline media is base64-encoded in bodies

    # ── Provider ─────────────────────────────────────────────
    # Required: the service refuses to start without it.
    gemini_api_key: str = Field(min_length=1)
    gemini_model: str = "gemini/gemini-2.0-flash"

    # ── LLM Generation Defaults (all optional, None = model default) ──
    max_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    seed: int | None = None

    # ── Media ────────────────────────────────────────────────
    media_dir: str = "public"
    video_poll_interval: float = 10.0  # seconds between file state checks
    video_poll_max_wait: float | None = None  # None = wait until READY/FAILED
    video_cleanup_on_failure: bool = True

    # ── Helpers ───────────────────────────────────────────────

    def get_default_llm_config(self) -> LLMConfig:
        """Build an :class:`LLMConfig` from global .env defaults."""
        return LLMConfig(
            model=self.gemini_model,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            top_p=self.top_p,
            seed=self.seed,
        )

    def get_provider_config(self) -> ProviderConfig:
        """Build the immutable provider connection handed to the services."""
        return ProviderConfig(
            api_key=self.gemini_api_key,
            llm=self.get_default_llm_config(),
        )


@lru_cache
def get_settings() -> Settings:
    """Singleton accessor for application settings."""
    return Settings()


def describe_settings_error(exc: ValidationError) -> str:
    """Operator-facing message for settings that failed validation."""
    if any(err["loc"] == ("gemini_api_key",) for err in exc.errors()):
        return "Missing API key. Set GEMINI_API_KEY in the environment or .env file."
    return f"Invalid configuration: {exc}"
