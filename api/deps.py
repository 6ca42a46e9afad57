"""Request-scoped dependencies.

The generation client and media library are built once in the app lifespan
and stored on ``app.state``; routes receive them through ``Depends`` so
tests can swap in doubles with ``app.dependency_overrides``.
"""

from __future__ import annotations

from fastapi import Request

from services.generation import GenerationClient
from services.media_library import MediaLibrary


def get_generation_client(request: Request) -> GenerationClient:
    return request.app.state.generation_client


def get_media_library(request: Request) -> MediaLibrary:
    return request.app.state.media_library
