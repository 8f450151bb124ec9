"""FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from pdfchat.api.routes.chat import router as chat_router
from pdfchat.api.routes.chat_sessions import router as chat_sessions_router
from pdfchat.api.routes.chunks import router as chunks_router
from pdfchat.api.routes.health import router as health_router
from pdfchat.api.routes.metrics import router as metrics_router
from pdfchat.api.routes.upload import router as upload_router
from pdfchat.config import get_settings
from pdfchat.db.engine import create_schema, get_async_engine
from pdfchat.errors import NotFoundError, UpstreamError, ValidationError
from pdfchat.utils.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(settings.log_level)
    if settings.auto_create_schema:
        await create_schema(get_async_engine())
        logger.info("Database schema ensured")
    yield


app = FastAPI(title="PDF Chat API", version="0.1.0", lifespan=lifespan)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(upload_router)
app.include_router(chat_router)
app.include_router(chat_sessions_router)
app.include_router(chunks_router)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"message": exc.message})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": exc.message})


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error(f"Upstream failure on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"message": "Server error during chat"},
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Server error"},
    )


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "PDF Chat API", "version": "0.1.0"}
