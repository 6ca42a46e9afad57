"""LLM service powered by LiteLLM, pinned to the configured Gemini model.

Model identifiers use LiteLLM's provider prefix, e.g.:
    - gemini/gemini-2.0-flash
    - gemini/gemini-1.5-flash
"""

from __future__ import annotations

from typing import AsyncGenerator, Sequence

import litellm

from config.llm_config import LLMConfig, ProviderConfig
from errors.exceptions import EmptyGenerationError
from models.generation import MediaReference
from services.multimodal import build_user_content


class LLMService:
    """Thin async wrapper around ``litellm.acompletion()``.

    The :class:`ProviderConfig` supplies the API key and default generation
    parameters.  Individual calls can still override any parameter via
    ``**overrides``.

    Priority chain (low → high):
        ProviderConfig.llm  →  per-call overrides
    """

    def __init__(self, provider: ProviderConfig, config: LLMConfig | None = None):
        self._api_key = provider.api_key
        self._config = provider.llm
        if config:
            self._config = self._config.merge(config)

    @property
    def model(self) -> str | None:
        return self._config.model

    def _build_kwargs(
        self,
        prompt: str,
        attachments: Sequence[MediaReference],
        overrides: dict,
    ) -> dict:
        kwargs: dict = {
            "model": self._config.model,
            "messages": [
                {"role": "user", "content": build_user_content(prompt, attachments)},
            ],
            "api_key": self._api_key,
            **self._config.to_litellm_kwargs(),
        }
        # Per-call overrides win
        kwargs.update(overrides)
        return kwargs

    async def complete(
        self,
        prompt: str,
        attachments: Sequence[MediaReference] = (),
        **overrides,
    ) -> str:
        """Send one user turn and return the first choice's text.

        Raises:
            EmptyGenerationError: the provider answered without any text.
        """
        response = await litellm.acompletion(
            **self._build_kwargs(prompt, attachments, overrides)
        )
        text = self._extract_text(response)
        if not text:
            raise EmptyGenerationError(self.model)
        return text

    async def stream(
        self,
        prompt: str,
        attachments: Sequence[MediaReference] = (),
        **overrides,
    ) -> AsyncGenerator[str, None]:
        """Yield text deltas in the order the provider produces them."""
        response = await litellm.acompletion(
            stream=True,
            **self._build_kwargs(prompt, attachments, overrides),
        )
        async for chunk in response:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                yield delta

    @staticmethod
    def _extract_text(response) -> str:
        if not response or not response.choices:
            return ""
        return response.choices[0].message.content or ""
