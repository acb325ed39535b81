from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.gzip import GZipMiddleware

from .api.errors import register_exception_handlers
from .api.v1.router import api_router
from .config import settings
from .db.base import get_database
from .utils.logging import get_logger, setup_logging

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await get_database().initialize()
    yield


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(
        title="Personal Knowledge Base API",
        debug=settings.debug,
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Origin",
            "Content-Type",
            "Content-Length",
            "Accept-Encoding",
            "Authorization",
        ],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    # GZip compression
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()
