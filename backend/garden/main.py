"""FastAPI app factory."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from garden.config import settings
from garden.errors import (
    ClassificationFailure,
    PersistenceFailure,
    QuotaExceeded,
    RecordNotFound,
)

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.garden_log_level.upper(), logging.INFO),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    from garden.dependencies import build_resources

    app.state.resources = build_resources(settings)
    try:
        yield
    finally:
        await app.state.resources.aclose()
        app.state.resources = None


def create_app() -> FastAPI:
    app = FastAPI(
        title="Garden",
        description="Doodle submission pipeline — classify, rate-limit, store and lay out drawings",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)

    from garden.api.router import api_router

    app.include_router(api_router)

    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(QuotaExceeded)
    async def quota_exceeded(request: Request, exc: QuotaExceeded) -> JSONResponse:
        from garden.admission.quota import QUOTA_MESSAGE

        return JSONResponse(
            status_code=429,
            content={
                "error": "Rate limit exceeded",
                "message": QUOTA_MESSAGE,
                "rateLimited": True,
                "currentCount": exc.current_count,
            },
        )

    @app.exception_handler(ClassificationFailure)
    async def classification_failure(request: Request, exc: ClassificationFailure) -> JSONResponse:
        logger.error("Error moderating image: %s", exc)
        return JSONResponse(
            status_code=502,
            content={"error": "Failed to moderate image", "details": str(exc)},
        )

    @app.exception_handler(PersistenceFailure)
    async def persistence_failure(request: Request, exc: PersistenceFailure) -> JSONResponse:
        logger.error("Error saving or uploading image: %s", exc)
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to save image", "details": str(exc)},
        )

    @app.exception_handler(RecordNotFound)
    async def record_not_found(request: Request, exc: RecordNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": "Not found", "details": str(exc)})


app = create_app()
