"""Generation request, media reference, and remote upload models."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from models.base import CamelModel


class InlineMedia(BaseModel):
    """Media bytes embedded directly in the generation call."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["inline"] = "inline"
    data: bytes = Field(repr=False)
    mime_type: str


class RemoteMedia(BaseModel):
    """Media previously uploaded to the provider, referenced by URI."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["remote"] = "remote"
    uri: str
    mime_type: str


MediaReference = Union[InlineMedia, RemoteMedia]


class GenerationRequest(BaseModel):
    """One prompt plus its ordered attachments — lives for a single HTTP call."""

    prompt: str = Field(..., min_length=1)
    attachments: list[MediaReference] = Field(default_factory=list)


class UploadState(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    READY = "READY"
    FAILED = "FAILED"


class RemoteUpload(BaseModel):
    """A local file submitted to the provider's file store.

    The provider owns the state; each poll yields a fresh instance rather
    than mutating this one.
    """

    model_config = ConfigDict(frozen=True)

    local_path: Path
    name: str
    uri: str
    mime_type: str
    state: UploadState = UploadState.PENDING

    @property
    def is_pending(self) -> bool:
        return self.state in (UploadState.PENDING, UploadState.PROCESSING)

    def as_reference(self) -> RemoteMedia:
        """Return the generation-ready reference. Only valid once READY."""
        if self.state is not UploadState.READY:
            raise ValueError(f"Upload '{self.name}' is {self.state.value}, not READY")
        return RemoteMedia(uri=self.uri, mime_type=self.mime_type)


# ── HTTP schemas ─────────────────────────────────────────────


class PromptRequest(CamelModel):
    """Body shared by every generation route.

    ``prompt`` is optional at the schema level so the route can answer a
    missing prompt with a plain 400 rather than a validation error.
    """

    prompt: str | None = None


class TextResponse(CamelModel):
    text: str
