"""Domain-specific exceptions for the multimodal gateway.

These exceptions allow the API layer to distinguish between client-side
input problems (missing local media) and provider-side generation failures,
and respond with the appropriate HTTP status.
"""

from __future__ import annotations

from pathlib import Path


class GatewayError(Exception):
    """Base class for all gateway errors."""


class MediaNotFoundError(GatewayError):
    """A required local media file does not exist.

    Raised before any provider call is made, so the request fails as a
    client error with no upstream side effects.
    """

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"Media file not found: {self.path.name}")


class GenerationError(GatewayError):
    """The provider call failed or produced nothing usable."""


class EmptyGenerationError(GenerationError):
    """The provider responded, but without any text output."""

    def __init__(self, model: str | None = None) -> None:
        self.model = model
        super().__init__(f"No text output received from {model or 'provider'}")


class UploadProcessingError(GenerationError):
    """The provider reported an uploaded file as FAILED.

    Never retried: the submission is abandoned and the request fails.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Remote processing failed for file '{name}'")


class UploadTimeoutError(GenerationError):
    """An uploaded file did not leave PROCESSING within the configured wait."""

    def __init__(self, name: str, waited: float) -> None:
        self.name = name
        self.waited = waited
        super().__init__(f"File '{name}' still processing after {waited:.0f}s")
