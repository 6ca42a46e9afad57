"""Multimodal helpers — build LiteLLM-compatible user content with media parts.

Converts :class:`~models.generation.MediaReference` items into OpenAI-style
content parts that LiteLLM translates for Gemini:

- inline images → ``image_url`` parts carrying a base64 data URI
- other inline media (audio) → ``file`` parts carrying a base64 data URI
- remote uploads → ``file`` parts carrying the provider file URI

When no attachments are present, returns a plain ``str`` so the text-only
path sends the simplest possible message.
"""

from __future__ import annotations

import base64
import logging
from typing import Sequence

from models.generation import InlineMedia, MediaReference, RemoteMedia

logger = logging.getLogger(__name__)

_IMAGE_PREFIXES = ("image/",)


def _is_image(mime_type: str) -> bool:
    return any(mime_type.startswith(p) for p in _IMAGE_PREFIXES)


def to_data_uri(media: InlineMedia) -> str:
    encoded = base64.b64encode(media.data).decode("ascii")
    return f"data:{media.mime_type};base64,{encoded}"


def to_content_part(media: MediaReference) -> dict:
    """Convert one media reference into a LiteLLM content part."""
    if isinstance(media, RemoteMedia):
        return {
            "type": "file",
            "file": {"file_id": media.uri, "format": media.mime_type},
        }

    data_uri = to_data_uri(media)
    if _is_image(media.mime_type):
        return {"type": "image_url", "image_url": {"url": data_uri}}
    return {"type": "file", "file": {"file_data": data_uri}}


def build_user_content(
    prompt: str,
    attachments: Sequence[MediaReference] = (),
) -> str | list[dict]:
    """Build the content of the single user message.

    - No attachments → returns ``prompt`` unchanged.
    - With attachments → text part first, then one part per attachment in
      the given order.
    """
    if not attachments:
        return prompt

    parts: list[dict] = [{"type": "text", "text": prompt}]
    parts.extend(to_content_part(a) for a in attachments)

    logger.debug(
        "Built multimodal prompt: %d attachment(s) + text (%d chars)",
        len(attachments), len(prompt),
    )
    return parts
