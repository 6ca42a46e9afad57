"""Provider file store — upload, state lookup and deletion via ``google-genai``.

Uses the async surface of an explicitly constructed ``genai.Client`` so no
process-wide SDK configuration is involved:

  ``client.aio.files.upload(file, config)`` → File(name, uri, mime_type, state)
  ``client.aio.files.get(name)``           → File with the current state
  ``client.aio.files.delete(name)``

Provider states map onto :class:`~models.generation.UploadState`:
  ACTIVE → READY, PROCESSING → PROCESSING, FAILED → FAILED,
  anything else (unspecified / missing) → PENDING.
"""

from __future__ import annotations

import logging
from pathlib import Path

from google import genai
from google.genai import types

from config.llm_config import ProviderConfig
from models.generation import RemoteUpload, UploadState

logger = logging.getLogger(__name__)

_STATE_MAP: dict[str, UploadState] = {
    "ACTIVE": UploadState.READY,
    "PROCESSING": UploadState.PROCESSING,
    "FAILED": UploadState.FAILED,
}


def map_state(state) -> UploadState:
    """Translate a provider ``FileState`` (enum or string) to an UploadState."""
    if state is None:
        return UploadState.PENDING
    key = getattr(state, "name", None) or str(state)
    return _STATE_MAP.get(key.rsplit(".", 1)[-1].upper(), UploadState.PENDING)


class RemoteFileService:
    """Owns the provider file-store calls for one API key."""

    def __init__(self, provider: ProviderConfig, client: genai.Client | None = None):
        self._client = client or genai.Client(api_key=provider.api_key)

    async def upload(self, path: Path, mime_type: str) -> RemoteUpload:
        """Submit *path* once and return the provider's handle for it."""
        file = await self._client.aio.files.upload(
            file=str(path),
            config=types.UploadFileConfig(mime_type=mime_type),
        )
        upload = RemoteUpload(
            local_path=path,
            name=file.name,
            uri=file.uri,
            mime_type=file.mime_type or mime_type,
            state=map_state(file.state),
        )
        logger.info("Uploaded %s as %s (%s)", path.name, upload.name, upload.mime_type)
        return upload

    async def refresh(self, upload: RemoteUpload) -> RemoteUpload:
        """Fetch the current state from the provider; never cached."""
        file = await self._client.aio.files.get(name=upload.name)
        return upload.model_copy(update={"state": map_state(file.state)})

    async def delete(self, name: str) -> None:
        await self._client.aio.files.delete(name=name)
        logger.info("Deleted remote file %s", name)
