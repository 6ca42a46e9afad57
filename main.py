"""FastAPI entry point for the multimodal generation gateway."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from config.settings import describe_settings_error, get_settings
from services.file_service import RemoteFileService
from services.generation import GenerationClient
from services.llm_service import LLMService
from services.media_library import MediaLibrary
from services.middleware import BodySizeLimitMiddleware, RequestIdMiddleware

logger = logging.getLogger(__name__)

try:
    settings = get_settings()
except ValidationError as exc:
    logging.basicConfig(level=logging.INFO)
    logger.critical(describe_settings_error(exc))
    raise SystemExit(1) from exc

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def build_generation_client() -> GenerationClient:
    """Construct the provider-facing client from settings."""
    provider = settings.get_provider_config()
    return GenerationClient(
        LLMService(provider),
        RemoteFileService(provider),
        poll_interval=settings.video_poll_interval,
        max_wait=settings.video_poll_max_wait,
        cleanup_on_failure=settings.video_cleanup_on_failure,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the shared, read-only collaborators once per worker."""
    app.state.generation_client = build_generation_client()
    app.state.media_library = MediaLibrary(settings.media_dir)
    logger.info(
        "Gateway ready — model=%s, media_dir=%s",
        settings.gemini_model,
        settings.media_dir,
    )
    yield


app = FastAPI(
    title="Multimodal Gateway",
    description="Prompt + local media generation backed by Gemini",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Middleware stack (outermost first) ─────────────────────────
# Order matters: CORS → RequestId → BodySizeLimit → route handler
app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors, same as a missing prompt."""
    logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": "Prompt must be a non-empty string"})


# ── Register routers ────────────────────────────────────────
from api.files import router as files_router  # noqa: E402
from api.generate import router as generate_router  # noqa: E402
from api.health import router as health_router  # noqa: E402

app.include_router(health_router)
app.include_router(generate_router)
app.include_router(files_router)


if __name__ == "__main__":
    if settings.debug:
        # Development: single worker with reload
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=settings.service_port,
            reload=True,
        )
    else:
        # Production: prefer gunicorn main:app -c deploy/gunicorn.conf.py
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=settings.service_port,
            workers=4,
            timeout_keep_alive=120,
        )
