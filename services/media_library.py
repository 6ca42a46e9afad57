"""Local media library — resolves the fixed sample assets under one directory.

The directory is read-only and shared by all requests. Lookups never leave
it: names containing path separators or ``..`` are treated as missing.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from config.media_catalog import MediaAsset
from errors.exceptions import MediaNotFoundError
from models.generation import InlineMedia

logger = logging.getLogger(__name__)


class MediaLibrary:
    """Read-only view over the static asset directory."""

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)

    def resolve(self, relative: str) -> Path | None:
        """Return the absolute path of *relative* if it is a file inside root."""
        if not relative or ".." in Path(relative).parts:
            return None
        candidate = self.root / relative
        try:
            candidate.resolve().relative_to(self.root.resolve())
        except ValueError:
            return None
        return candidate if candidate.is_file() else None

    def require_path(self, asset: MediaAsset) -> Path:
        """Return the asset's path or raise :class:`MediaNotFoundError`."""
        path = self.resolve(asset.filename)
        if path is None:
            logger.error("File not found: %s", self.root / asset.filename)
            raise MediaNotFoundError(self.root / asset.filename)
        return path

    def load_inline(self, asset: MediaAsset) -> InlineMedia:
        """Read the asset into memory for inline submission."""
        path = self.require_path(asset)
        return InlineMedia(data=path.read_bytes(), mime_type=asset.mime_type)

    def load_available(self, assets: Iterable[MediaAsset]) -> list[InlineMedia]:
        """Load every asset that exists, silently skipping the missing ones."""
        loaded: list[InlineMedia] = []
        for asset in assets:
            try:
                loaded.append(self.load_inline(asset))
            except MediaNotFoundError:
                continue
        return loaded
