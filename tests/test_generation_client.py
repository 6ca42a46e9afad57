"""Tests for services.generation — the remote upload / poll / release protocol."""

import asyncio

import pytest

from errors.exceptions import (
    MediaNotFoundError,
    UploadProcessingError,
    UploadTimeoutError,
)
from models.generation import GenerationRequest, RemoteMedia, RemoteUpload, UploadState
from services.generation import GenerationClient
from tests.conftest import REMOTE_URI, ScriptedFiles, ScriptedLLM


@pytest.fixture
def video(media_dir):
    return media_dir / "Big_Buck_Bunny.mp4"


@pytest.mark.asyncio
async def test_generate_passes_prompt_and_attachments(generation_client, llm):
    ref = RemoteMedia(uri=REMOTE_URI, mime_type="video/mp4")
    text = await generation_client.generate(GenerationRequest(prompt="p", attachments=[ref]))
    assert text == "scripted answer"
    assert llm.calls == [("p", [ref])]


@pytest.mark.asyncio
async def test_polls_exactly_until_ready(generation_client, files, video):
    files.states = [UploadState.PROCESSING, UploadState.PROCESSING, UploadState.READY]
    upload = await generation_client.upload_and_wait(video, "video/mp4")
    assert upload.state is UploadState.READY
    assert files.polls == 3
    assert files.uploaded == [video]


@pytest.mark.asyncio
async def test_ready_on_first_poll_does_not_sleep(llm, files, video, monkeypatch):
    sleeps = []

    async def fake_sleep(delay):
        sleeps.append(delay)

    monkeypatch.setattr("services.generation.asyncio.sleep", fake_sleep)
    client = GenerationClient(llm, files, poll_interval=10.0)
    await client.upload_and_wait(video, "video/mp4")
    assert sleeps == []
    assert files.polls == 1


@pytest.mark.asyncio
async def test_waits_fixed_interval_between_polls(llm, video, monkeypatch):
    sleeps = []

    async def fake_sleep(delay):
        sleeps.append(delay)

    monkeypatch.setattr("services.generation.asyncio.sleep", fake_sleep)
    files = ScriptedFiles(states=[UploadState.PENDING, UploadState.PROCESSING, UploadState.READY])
    client = GenerationClient(llm, files, poll_interval=10.0)
    await client.upload_and_wait(video, "video/mp4")
    assert sleeps == [10.0, 10.0]


@pytest.mark.asyncio
async def test_failed_upload_is_not_retried(generation_client, files, llm, video):
    files.states = [UploadState.PROCESSING, UploadState.FAILED]
    with pytest.raises(UploadProcessingError) as exc_info:
        await generation_client.generate_with_upload("p", video, "video/mp4")
    assert exc_info.value.name == "files/abc123"
    assert len(files.uploaded) == 1
    assert files.polls == 2
    assert llm.calls == []
    assert files.deleted == ["files/abc123"]


@pytest.mark.asyncio
async def test_failed_upload_kept_when_cleanup_disabled(llm, video):
    files = ScriptedFiles(states=[UploadState.PROCESSING, UploadState.FAILED])
    client = GenerationClient(llm, files, poll_interval=0, cleanup_on_failure=False)
    with pytest.raises(UploadProcessingError):
        await client.generate_with_upload("p", video, "video/mp4")
    assert files.deleted == []
    assert llm.calls == []


class _FlakyFiles(ScriptedFiles):
    """File store whose second state check fails at the transport level."""

    async def refresh(self, upload):
        if self.polls == 1:
            self.polls += 1
            raise RuntimeError("503 from provider")
        return await super().refresh(upload)


@pytest.mark.asyncio
async def test_poll_error_releases_upload(llm, video):
    files = _FlakyFiles(states=[UploadState.PROCESSING])
    client = GenerationClient(llm, files, poll_interval=0, cleanup_on_failure=True)
    with pytest.raises(RuntimeError, match="503"):
        await client.generate_with_upload("p", video, "video/mp4")
    assert files.polls == 2
    assert files.deleted == ["files/abc123"]
    assert llm.calls == []


@pytest.mark.asyncio
async def test_poll_error_keeps_upload_when_cleanup_disabled(llm, video):
    files = _FlakyFiles(states=[UploadState.PROCESSING])
    client = GenerationClient(llm, files, poll_interval=0, cleanup_on_failure=False)
    with pytest.raises(RuntimeError):
        await client.upload_and_wait(video, "video/mp4")
    assert files.deleted == []


@pytest.mark.asyncio
async def test_missing_file_never_contacts_provider(generation_client, files, tmp_path):
    with pytest.raises(MediaNotFoundError):
        await generation_client.upload_and_wait(tmp_path / "missing.mp4", "video/mp4")
    assert files.uploaded == []
    assert files.polls == 0


@pytest.mark.asyncio
async def test_generation_sees_only_ready_reference(generation_client, files, llm, video):
    files.states = [UploadState.PROCESSING, UploadState.READY]
    text, upload = await generation_client.generate_with_upload("p", video, "video/mp4")
    assert text == "scripted answer"
    assert upload.state is UploadState.READY
    assert llm.calls == [("p", [RemoteMedia(uri=REMOTE_URI, mime_type="video/mp4")])]
    # success path leaves release to the caller
    assert files.deleted == []


@pytest.mark.asyncio
async def test_generation_failure_releases_when_enabled(files, video):
    llm = ScriptedLLM()
    llm.error = RuntimeError("boom")
    client = GenerationClient(llm, files, poll_interval=0, cleanup_on_failure=True)
    with pytest.raises(RuntimeError):
        await client.generate_with_upload("p", video, "video/mp4")
    assert files.deleted == ["files/abc123"]


@pytest.mark.asyncio
async def test_generation_failure_keeps_file_when_disabled(files, video):
    llm = ScriptedLLM()
    llm.error = RuntimeError("boom")
    client = GenerationClient(llm, files, poll_interval=0, cleanup_on_failure=False)
    with pytest.raises(RuntimeError):
        await client.generate_with_upload("p", video, "video/mp4")
    assert files.deleted == []


@pytest.mark.asyncio
async def test_timeout_only_when_configured(llm, video):
    files = ScriptedFiles(states=[UploadState.PROCESSING])
    client = GenerationClient(llm, files, poll_interval=0.01, max_wait=0.03)
    with pytest.raises(UploadTimeoutError):
        await client.upload_and_wait(video, "video/mp4")
    assert files.polls >= 2
    assert files.deleted == ["files/abc123"]


@pytest.mark.asyncio
async def test_release_swallows_and_reports_failure(generation_client, files, video):
    upload = RemoteUpload(
        local_path=video, name="files/x", uri=REMOTE_URI,
        mime_type="video/mp4", state=UploadState.READY,
    )
    files.delete_error = RuntimeError("gone")
    assert await generation_client.release(upload) is False

    files.delete_error = None
    assert await generation_client.release(upload) is True
    assert files.deleted == ["files/x"]


@pytest.mark.asyncio
async def test_concurrent_polling_loops_share_the_loop(llm, media_dir):
    """Several uploads waiting at once finish without serialising."""
    video = media_dir / "Big_Buck_Bunny.mp4"

    async def one():
        files = ScriptedFiles(states=[UploadState.PROCESSING] * 5 + [UploadState.READY])
        client = GenerationClient(llm, files, poll_interval=0.02)
        await client.upload_and_wait(video, "video/mp4")
        return files.polls

    loop = asyncio.get_running_loop()
    started = loop.time()
    polls = await asyncio.gather(*(one() for _ in range(10)))
    elapsed = loop.time() - started

    assert polls == [6] * 10
    # 10 sequential loops would take >= 1s
    assert elapsed < 0.8
