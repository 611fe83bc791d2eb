"""FastAPI endpoint forwarding prompts to Gemini.

Endpoints:
- GET /health
- POST /api/generate  { "prompt": "...", "type": "text" | "image" }
"""
from __future__ import annotations
import logging
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from shadowbinder.common.config import ServerSettings
from shadowbinder.common.logging_setup import setup_logging
from shadowbinder.common.schema import ErrorBody, GenerationRequest, GenerationResponse, GenerationType
from shadowbinder.provider.base import TextProvider
from shadowbinder.provider.gemini import GeminiProvider

LOGGER = logging.getLogger("shadowbinder.serve.app")
setup_logging()

MISSING_KEY_MESSAGE = "Server configuration error: Missing API key"
INVALID_BODY_MESSAGE = "Prompt and valid type (text or image) are required"
IMAGE_UNSUPPORTED_MESSAGE = "Image generation not supported in this version"
GENERIC_ERROR_MESSAGE = "Internal server error"


class ApiError(Exception):
    """Failure with a fixed HTTP status, rendered as {"error": message}."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


app = FastAPI(title="Shadowbinder", version="0.1.0")


@app.exception_handler(ApiError)
async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(ErrorBody(error=exc.message).model_dump(), status_code=exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        ErrorBody(error=str(exc.detail)).model_dump(), status_code=exc.status_code, headers=exc.headers
    )


def get_settings() -> ServerSettings:
    return ServerSettings.from_env()


def get_provider(settings: ServerSettings = Depends(get_settings)) -> TextProvider | None:
    """Build the provider for this request, or None when no credential is configured."""
    if not settings.api_key:
        return None
    return GeminiProvider(
        api_key=settings.api_key,
        model_id=settings.model_id,
        base_url=settings.base_url,
        timeout=settings.timeout_s,
    )


@app.get("/health")
def health(settings: ServerSettings = Depends(get_settings)) -> dict[str, Any]:
    return {"status": "ok", "model": settings.model_id, "configured": settings.api_key is not None}


async def _parse_body(request: Request) -> GenerationRequest:
    try:
        payload = await request.json()
    except ValueError:
        LOGGER.info("Rejected request with malformed JSON body")
        raise ApiError(400, INVALID_BODY_MESSAGE)
    if not isinstance(payload, dict):
        raise ApiError(400, INVALID_BODY_MESSAGE)
    try:
        return GenerationRequest.model_validate(payload)
    except ValidationError as e:
        LOGGER.info("Rejected invalid request: %d validation error(s)", e.error_count())
        raise ApiError(400, INVALID_BODY_MESSAGE)


_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorBody, "description": "Missing prompt or unknown type"},
    500: {"model": ErrorBody, "description": "Missing API key or provider failure"},
    501: {"model": ErrorBody, "description": "Image generation is not supported"},
}


@app.post("/api/generate", response_model=GenerationResponse, responses=_ERROR_RESPONSES)
async def generate(
    request: Request,
    provider: TextProvider | None = Depends(get_provider),
) -> GenerationResponse:
    # Credential is checked before the body is read.
    if provider is None:
        LOGGER.error("GEMINI_API_KEY is not configured")
        raise ApiError(500, MISSING_KEY_MESSAGE)

    body = await _parse_body(request)

    if body.type is GenerationType.IMAGE:
        raise ApiError(501, IMAGE_UNSUPPORTED_MESSAGE)

    try:
        text = await run_in_threadpool(provider.generate_text, body.prompt)
    except Exception as e:
        LOGGER.exception("Provider call failed")
        raise ApiError(500, str(e) or GENERIC_ERROR_MESSAGE) from e

    return GenerationResponse(type=GenerationType.TEXT, content=text)
