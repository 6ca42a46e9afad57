"""Generation client — inline generation plus the remote media upload protocol.

Large media (video) cannot be sent inline, so it goes through the provider's
file store:

  1. Submit the local file once → handle + URI.
  2. Poll the handle's state until READY or FAILED.  PENDING / PROCESSING
     suspends for ``poll_interval`` seconds between checks; FAILED aborts
     without resubmitting.
  3. Generate with a remote reference to the READY file.
  4. Release the remote file (the API layer schedules this after the
     response has been sent).

There is no wait limit unless ``max_wait`` is given.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import AsyncGenerator

from errors.exceptions import (
    MediaNotFoundError,
    UploadProcessingError,
    UploadTimeoutError,
)
from models.generation import GenerationRequest, RemoteUpload, UploadState
from services.file_service import RemoteFileService
from services.llm_service import LLMService

logger = logging.getLogger(__name__)


class GenerationClient:
    """Built once per process from explicit config; holds no per-request state."""

    def __init__(
        self,
        llm: LLMService,
        files: RemoteFileService,
        *,
        poll_interval: float = 10.0,
        max_wait: float | None = None,
        cleanup_on_failure: bool = True,
    ) -> None:
        self._llm = llm
        self._files = files
        self.poll_interval = poll_interval
        self.max_wait = max_wait
        self.cleanup_on_failure = cleanup_on_failure

    @property
    def model(self) -> str | None:
        return self._llm.model

    # ── Inline path ──────────────────────────────────────────

    async def generate(self, request: GenerationRequest) -> str:
        """Single round trip: prompt + inline/remote parts → text."""
        return await self._llm.complete(request.prompt, request.attachments)

    def stream(self, request: GenerationRequest) -> AsyncGenerator[str, None]:
        return self._llm.stream(request.prompt, request.attachments)

    # ── Remote upload path ───────────────────────────────────

    async def upload_and_wait(self, path: Path, mime_type: str) -> RemoteUpload:
        """Submit *path* and block (cooperatively) until it is READY.

        Raises:
            MediaNotFoundError: *path* does not exist; nothing was submitted.
            UploadProcessingError: the provider reported FAILED.
            UploadTimeoutError: still processing after ``max_wait`` seconds.
        """
        if not path.is_file():
            raise MediaNotFoundError(path)

        upload = await self._files.upload(path, mime_type)
        try:
            return await self._wait_until_ready(upload)
        except Exception:
            await self._cleanup_after_failure(upload)
            raise

    async def _wait_until_ready(self, upload: RemoteUpload) -> RemoteUpload:
        started = time.monotonic()

        upload = await self._files.refresh(upload)
        while upload.is_pending:
            waited = time.monotonic() - started
            if self.max_wait is not None and waited >= self.max_wait:
                raise UploadTimeoutError(upload.name, waited)
            logger.debug(
                "File %s is %s (%.0fs elapsed), next check in %.0fs",
                upload.name, upload.state.value, waited, self.poll_interval,
            )
            await asyncio.sleep(self.poll_interval)
            upload = await self._files.refresh(upload)

        if upload.state is UploadState.FAILED:
            logger.error("File %s failed remote processing", upload.name)
            raise UploadProcessingError(upload.name)

        logger.info(
            "File %s ready after %.1fs", upload.name, time.monotonic() - started,
        )
        return upload

    async def generate_with_upload(
        self,
        prompt: str,
        path: Path,
        mime_type: str,
    ) -> tuple[str, RemoteUpload]:
        """Upload, wait for READY, generate.  Returns the text and the upload.

        The caller owns the returned upload and must :meth:`release` it.
        """
        upload = await self.upload_and_wait(path, mime_type)
        request = GenerationRequest(prompt=prompt, attachments=[upload.as_reference()])
        try:
            text = await self.generate(request)
        except Exception:
            await self._cleanup_after_failure(upload)
            raise
        return text, upload

    async def release(self, upload: RemoteUpload) -> bool:
        """Best-effort delete of the remote file.  Failures are logged only."""
        try:
            await self._files.delete(upload.name)
        except Exception as exc:
            logger.warning("Failed to delete remote file %s: %s", upload.name, exc)
            return False
        return True

    async def _cleanup_after_failure(self, upload: RemoteUpload) -> None:
        if self.cleanup_on_failure:
            await self.release(upload)
        else:
            logger.warning("Leaving remote file %s in place after failure", upload.name)
