"""Reusable LLM generation parameters and provider connection config.

LLMConfig is a standalone Pydantic model that can be:
- embedded in Settings as the global default,
- passed per-call for one-off overrides.

Priority chain (low → high):
    .env global defaults  →  per-call overrides
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class LLMConfig(BaseModel):
    """LLM generation parameters.

    All fields are optional.  ``None`` means "use the model's default".
    """

    model: str | None = Field(default=None, description="LiteLLM model identifier")
    max_tokens: int | None = Field(default=None, description="Max tokens to generate")
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    seed: int | None = Field(default=None, description="Random seed for reproducibility")
    stop: list[str] | None = Field(default=None, description="Stop sequences")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def merge(self, overrides: LLMConfig) -> LLMConfig:
        """Return a new LLMConfig: *self* as base, *overrides* wins on non-None fields."""
        base = self.model_dump(exclude_none=True)
        over = overrides.model_dump(exclude_none=True)
        base.update(over)
        return LLMConfig(**base)

    def to_litellm_kwargs(self) -> dict:
        """Convert to ``litellm.acompletion()``-compatible keyword arguments."""
        kw: dict = {}
        for field in ("max_tokens", "temperature", "top_p", "seed", "stop"):
            val = getattr(self, field)
            if val is not None:
                kw[field] = val
        return kw


class ProviderConfig(BaseModel):
    """Connection to the generative provider — built once, shared read-only."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(min_length=1, repr=False)
    llm: LLMConfig = Field(default_factory=LLMConfig)

    @property
    def model(self) -> str | None:
        return self.llm.model
