"""Serve the sample media directory read-only under ``/public``.

Security: only files inside the configured media directory are served.
Path traversal (``..``) is rejected.
"""

from __future__ import annotations

import logging
import mimetypes

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from api.deps import get_media_library
from services.media_library import MediaLibrary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/public", tags=["files"])


@router.get("/{filename:path}")
async def serve_public_file(
    filename: str,
    library: MediaLibrary = Depends(get_media_library),
):
    """Return the raw bytes of a file from the media directory."""
    if ".." in filename.split("/") or "\\" in filename:
        raise HTTPException(status_code=400, detail="Invalid filename")

    filepath = library.resolve(filename)
    if filepath is None:
        logger.warning("Public file not found: %s", filename)
        raise HTTPException(status_code=404, detail="File not found")

    content_type, _ = mimetypes.guess_type(filepath.name)
    return FileResponse(
        path=str(filepath),
        media_type=content_type or "application/octet-stream",
    )
