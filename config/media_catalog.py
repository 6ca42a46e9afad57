"""Fixed sample assets served from the media directory and used by the routes."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class MediaAsset(BaseModel):
    """A named file under the media directory plus the MIME type sent upstream."""

    model_config = ConfigDict(frozen=True)

    filename: str
    mime_type: str


SINGLE_IMAGE = MediaAsset(filename="jetpack.jpg", mime_type="image/jpeg")

IMAGE_SET: tuple[MediaAsset, ...] = (
    SINGLE_IMAGE,
    MediaAsset(filename="piranha.jpg", mime_type="image/jpeg"),
    MediaAsset(filename="firefighter.jpg", mime_type="image/jpeg"),
)

AUDIO_CLIP = MediaAsset(filename="samplesmall.mp3", mime_type="audio/mp3")

VIDEO_CLIP = MediaAsset(filename="Big_Buck_Bunny.mp4", mime_type="video/mp4")
