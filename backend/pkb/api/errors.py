from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi.responses import JSONResponse

from pkb.core.errors import PKBError
from pkb.utils.logging import get_logger

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

logger = get_logger(__name__)


async def handle_pkb_error(request: Request, exc: PKBError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "%s %s failed: %s",
            request.method,
            request.url.path,
            exc.message,
            extra={"error_type": exc.error_type, "details": exc.details},
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    """Map knowledge base errors to JSON responses with their status codes."""
    app.add_exception_handler(PKBError, handle_pkb_error)
