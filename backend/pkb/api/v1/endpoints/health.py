from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from pkb.config import settings
from pkb.core.errors import StoreFailure
from pkb.db.base import Database
from pkb.dependencies import get_db

router = APIRouter()


@router.get("/")
async def health_check():
    """Health check endpoint."""
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "healthy",
            "service": "pkb-api",
            "version": "0.1.0"
        }
    )


@router.get("/ready")
async def readiness_check(db: Database = Depends(get_db)):
    """Readiness check endpoint."""
    db_status = "connected"
    try:
        await db.ping()
    except StoreFailure as e:
        db_status = f"error: {e.message}"

    return JSONResponse(
        status_code=status.HTTP_200_OK if db_status == "connected" else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if db_status == "connected" else "unavailable",
            "database": db_status,
            "embedding_model": settings.embedding_model,
            "api_prefix": settings.api_prefix
        }
    )
