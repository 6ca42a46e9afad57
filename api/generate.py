"""Generation endpoints — prompt-only, streaming, and prompt + local media.

Every route requires a non-empty ``prompt`` and answers 400 before touching
the provider when it is missing or when a required local file is absent.
Provider failures are logged and reported as a generic 500; upstream error
detail never reaches the caller.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.responses import StreamingResponse

from api.deps import get_generation_client, get_media_library
from config.media_catalog import AUDIO_CLIP, IMAGE_SET, SINGLE_IMAGE, VIDEO_CLIP
from errors.exceptions import MediaNotFoundError, UploadTimeoutError
from models.generation import GenerationRequest, PromptRequest, TextResponse
from services.generation import GenerationClient
from services.media_library import MediaLibrary

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generate"])


def _require_prompt(req: PromptRequest) -> str:
    if not req.prompt:
        raise HTTPException(status_code=400, detail="Prompt is required")
    return req.prompt


async def _generate(
    client: GenerationClient,
    request: GenerationRequest,
    failure: str,
) -> TextResponse:
    try:
        text = await client.generate(request)
    except Exception:
        logger.exception(failure)
        raise HTTPException(status_code=500, detail=failure)
    return TextResponse(text=text)


@router.post("/generate-text", response_model=TextResponse)
async def generate_text(
    req: PromptRequest,
    client: GenerationClient = Depends(get_generation_client),
):
    """Generate text from the prompt alone."""
    prompt = _require_prompt(req)
    return await _generate(client, GenerationRequest(prompt=prompt), "Error generating text")


async def _relay(first: str, stream: AsyncGenerator[str, None]) -> AsyncGenerator[str, None]:
    """Forward provider chunks in order; a mid-stream failure aborts the body."""
    try:
        if first:
            yield first
        async for chunk in stream:
            yield chunk
    except Exception:
        logger.exception("Error streaming text")
        raise
    finally:
        await stream.aclose()


@router.post("/generate-text-streaming")
async def generate_text_streaming(
    req: PromptRequest,
    client: GenerationClient = Depends(get_generation_client),
):
    """Stream generated text as a chunked ``text/plain`` body.

    The first chunk is awaited before the response starts so a provider
    that fails up front still gets a proper 500.
    """
    prompt = _require_prompt(req)
    stream = client.stream(GenerationRequest(prompt=prompt))
    try:
        first = await anext(stream)
    except StopAsyncIteration:
        first = ""
    except Exception:
        logger.exception("Error streaming text")
        await stream.aclose()
        raise HTTPException(status_code=500, detail="Error streaming text")

    return StreamingResponse(_relay(first, stream), media_type="text/plain")


@router.post("/generate-with-image", response_model=TextResponse)
async def generate_with_image(
    req: PromptRequest,
    client: GenerationClient = Depends(get_generation_client),
    library: MediaLibrary = Depends(get_media_library),
):
    """Generate from the prompt plus the fixed sample image."""
    prompt = _require_prompt(req)
    try:
        image = library.load_inline(SINGLE_IMAGE)
    except MediaNotFoundError:
        raise HTTPException(status_code=400, detail="Image file not found")

    request = GenerationRequest(prompt=prompt, attachments=[image])
    return await _generate(client, request, "Error generating with image")


@router.post("/generate-with-images", response_model=TextResponse)
async def generate_with_images(
    req: PromptRequest,
    client: GenerationClient = Depends(get_generation_client),
    library: MediaLibrary = Depends(get_media_library),
):
    """Generate from the prompt plus whichever sample images are present."""
    prompt = _require_prompt(req)
    images = library.load_available(IMAGE_SET)
    if not images:
        raise HTTPException(status_code=400, detail="No valid image files found")
    if len(images) < len(IMAGE_SET):
        logger.info("Using %d of %d sample images", len(images), len(IMAGE_SET))

    request = GenerationRequest(prompt=prompt, attachments=images)
    return await _generate(client, request, "Error generating with multiple images")


@router.post("/generate-with-audio", response_model=TextResponse)
async def generate_with_audio(
    req: PromptRequest,
    client: GenerationClient = Depends(get_generation_client),
    library: MediaLibrary = Depends(get_media_library),
):
    """Generate from the prompt plus the fixed sample audio clip."""
    prompt = _require_prompt(req)
    try:
        audio = library.load_inline(AUDIO_CLIP)
    except MediaNotFoundError:
        raise HTTPException(status_code=400, detail="Audio file not found")

    request = GenerationRequest(prompt=prompt, attachments=[audio])
    return await _generate(client, request, "Error generating with audio")


@router.post("/generate-with-video", response_model=TextResponse)
async def generate_with_video(
    req: PromptRequest,
    background_tasks: BackgroundTasks,
    client: GenerationClient = Depends(get_generation_client),
    library: MediaLibrary = Depends(get_media_library),
):
    """Generate from the prompt plus the sample video, via the file store.

    The video is uploaded, polled until the provider reports it READY, and
    referenced by URI.  The remote copy is deleted after the response has
    been sent.
    """
    prompt = _require_prompt(req)
    try:
        path = library.require_path(VIDEO_CLIP)
    except MediaNotFoundError:
        raise HTTPException(status_code=400, detail="Video file not found")

    try:
        text, upload = await client.generate_with_upload(prompt, path, VIDEO_CLIP.mime_type)
    except MediaNotFoundError:
        raise HTTPException(status_code=400, detail="Video file not found")
    except UploadTimeoutError:
        logger.exception("Timed out waiting for video processing")
        raise HTTPException(status_code=504, detail="Timed out processing video")
    except Exception:
        logger.exception("Error generating with video")
        raise HTTPException(status_code=500, detail="Error generating with video")

    background_tasks.add_task(client.release, upload)
    return TextResponse(text=text)
