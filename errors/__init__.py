"""Custom exception hierarchy for the multimodal gateway."""

from errors.exceptions import (
    EmptyGenerationError,
    GatewayError,
    GenerationError,
    MediaNotFoundError,
    UploadProcessingError,
    UploadTimeoutError,
)

__all__ = [
    "EmptyGenerationError",
    "GatewayError",
    "GenerationError",
    "MediaNotFoundError",
    "UploadProcessingError",
    "UploadTimeoutError",
]
