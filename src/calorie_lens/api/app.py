"""FastAPI application factory for the analysis proxy."""

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from calorie_lens.api.models import AnalyzeFoodRequest, ErrorResponse
from calorie_lens.app_logging import configure_logging
from calorie_lens.containers import AppContainer
from calorie_lens.domain.errors import (
    CompletionError,
    EmptyResponseError,
    InvalidImageError,
    OutputError,
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.middleware("http")
    async def cors_headers(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/")
    async def analyze_food(request: Request) -> JSONResponse:
        """Analyze a base64 food photo and return its nutrition record."""
        state_container: AppContainer = request.app.state.container
        try:
            payload = await request.json()
            try:
                body = AnalyzeFoodRequest.model_validate(payload)
            except ValidationError:
                body = AnalyzeFoodRequest()
            if not body.image_base64 or not body.image_base64.strip():
                return _error(400, "Image data is required")

            service = state_container.analysis_service
            if service is None:
                logger.error("Analysis requested but OPENAI_API_KEY is not set")
                return _error(500, "OpenAI API key not configured")

            try:
                record = await service.analyze_base64(body.image_base64)
            except InvalidImageError:
                return _error(400, "Invalid image data")
            except EmptyResponseError:
                return _error(500, "No analysis received from OpenAI")
            except CompletionError as exc:
                logger.warning("OpenAI request failed: kind=%s %s", exc.kind, exc)
                return _error(500, "Failed to analyze image")
            except OutputError as exc:
                logger.warning(
                    "Failed to parse OpenAI response: %s raw=%r", exc, exc.raw_text
                )
                return _error(500, "Failed to parse analysis results")
            return JSONResponse(content=record.to_payload())
        except Exception:
            logger.exception("Analysis proxy failed")
            return _error(500, "Internal server error")

    @app.exception_handler(StarletteHTTPException)
    async def http_error(
        request: Request, exc: StarletteHTTPException
    ) -> Response:
        if exc.status_code == 405:
            return _error(405, "Method not allowed")
        return await http_exception_handler(request, exc)

    return app


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content=ErrorResponse(error=message).model_dump()
    )
