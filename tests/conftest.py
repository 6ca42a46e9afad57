"""Shared pytest fixtures and provider doubles.

Provides:
- ``ScriptedLLM``: records every call, returns scripted text / chunks
- ``ScriptedFiles``: file store whose state polls follow a scripted sequence
- ``media_dir``: temp directory holding every sample asset
- ``client``: httpx AsyncClient bound to the app with the doubles injected
"""

from __future__ import annotations

import os

# Settings require a key at import time of ``main``.
os.environ.setdefault("GEMINI_API_KEY", "test-key")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from api.deps import get_generation_client, get_media_library  # noqa: E402
from models.generation import RemoteUpload, UploadState  # noqa: E402
from services.generation import GenerationClient  # noqa: E402
from services.media_library import MediaLibrary  # noqa: E402

SAMPLE_FILES = (
    "jetpack.jpg",
    "piranha.jpg",
    "firefighter.jpg",
    "samplesmall.mp3",
    "Big_Buck_Bunny.mp4",
)

REMOTE_URI = "https://generativelanguage.googleapis.com/v1beta/files/abc123"


class ScriptedLLM:
    """Stands in for :class:`services.llm_service.LLMService`."""

    model = "gemini/test-model"

    def __init__(self, text: str = "scripted answer", chunks=("Hello", ", ", "world")):
        self.text = text
        self.chunks = list(chunks)
        self.error: Exception | None = None
        self.stream_error: Exception | None = None
        self.calls: list[tuple[str, list]] = []
        self.stream_closed = 0

    async def complete(self, prompt, attachments=()):
        self.calls.append((prompt, list(attachments)))
        if self.error:
            raise self.error
        return self.text

    async def stream(self, prompt, attachments=()):
        self.calls.append((prompt, list(attachments)))
        try:
            for chunk in self.chunks:
                yield chunk
            if self.stream_error:
                raise self.stream_error
        finally:
            self.stream_closed += 1


class ScriptedFiles:
    """Stands in for :class:`services.file_service.RemoteFileService`.

    ``states`` is consumed one entry per poll; the last entry repeats.
    """

    def __init__(self, states=(UploadState.READY,)):
        self.states = list(states)
        self.uploaded: list = []
        self.polls = 0
        self.deleted: list[str] = []
        self.delete_error: Exception | None = None

    async def upload(self, path, mime_type):
        self.uploaded.append(path)
        return RemoteUpload(
            local_path=path,
            name="files/abc123",
            uri=REMOTE_URI,
            mime_type=mime_type,
            state=UploadState.PENDING,
        )

    async def refresh(self, upload):
        state = self.states[min(self.polls, len(self.states) - 1)]
        self.polls += 1
        return upload.model_copy(update={"state": state})

    async def delete(self, name):
        if self.delete_error:
            raise self.delete_error
        self.deleted.append(name)


@pytest.fixture
def media_dir(tmp_path):
    """Temp media directory with every sample asset present."""
    for name in SAMPLE_FILES:
        (tmp_path / name).write_bytes(b"fake-" + name.encode())
    return tmp_path


@pytest.fixture
def llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture
def files() -> ScriptedFiles:
    return ScriptedFiles()


@pytest.fixture
def generation_client(llm, files) -> GenerationClient:
    return GenerationClient(llm, files, poll_interval=0)


@pytest.fixture
async def client(generation_client, media_dir):
    from main import app

    app.dependency_overrides[get_generation_client] = lambda: generation_client
    app.dependency_overrides[get_media_library] = lambda: MediaLibrary(media_dir)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
