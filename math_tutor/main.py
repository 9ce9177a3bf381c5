"""FastAPI application entry point."""

import logging
import traceback
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from math_tutor.api.routes import catalog, content, health, tutor
from math_tutor.core.config import get_settings, settings
from math_tutor.core.limiter import limiter
from math_tutor.core.logging import BASE_LOGGER, setup_logging

setup_logging(
    level="DEBUG" if settings.DEBUG else "INFO",
    json_format=not settings.DEBUG,
)
logger = logging.getLogger(BASE_LOGGER)

INVALID_INPUT_MESSAGE = "Invalid input"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    current = get_settings()
    logger.info("Starting %s v%s ...", current.APP_NAME, current.APP_VERSION)

    if not current.OPENAI_API_KEY:
        raise RuntimeError(
            "OPENAI_API_KEY is not set. Add it to the environment or to .env before starting the server."
        )

    logger.info("Tutor model: %s (max_tokens=%d)", current.OPENAI_MODEL, current.OPENAI_MAX_TOKENS)
    yield
    logger.info("%s shutting down...", current.APP_NAME)


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="AI Math Tutor API - grade-aware explanations, hints, solutions and practice",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# /metrics endpoint
Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    should_instrument_requests_inprogress=True,
    excluded_handlers=["/metrics", "/docs", "/redoc", "/openapi.json", "/"],
).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)


app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Turn unhandled exceptions into a safe JSON response."""
    error_id = uuid.uuid4().hex[:12]
    logger.error(
        "Unhandled exception [error_id=%s] %s %s: %s\n%s",
        error_id,
        request.method,
        request.url.path,
        exc,
        traceback.format_exc(),
        extra={"error_id": error_id},
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error. Please try again later.",
            "error_id": error_id,
        },
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render HTTP errors as `{error}`."""
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or "Request failed"
    else:
        message = str(detail) if detail else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


def _field_name(loc) -> str:
    parts = [str(part) for part in loc if part != "body"]
    return ".".join(parts) or "body"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Request validation errors become 400 with one entry per field."""
    logger.warning(
        "Validation error %s %s: %s",
        request.method,
        request.url.path,
        exc.errors(),
    )
    return JSONResponse(
        status_code=400,
        content={
            "error": INVALID_INPUT_MESSAGE,
            "details": [
                {
                    "field": _field_name(err.get("loc", ())),
                    "message": err.get("msg", ""),
                }
                for err in exc.errors()
            ],
        },
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(health.router)
app.include_router(tutor.router, prefix="/api")
app.include_router(content.router, prefix="/api")
app.include_router(catalog.router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }


def main() -> None:
    import uvicorn

    uvicorn.run(
        "math_tutor.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    main()
