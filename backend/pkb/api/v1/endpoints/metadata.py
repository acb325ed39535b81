from __future__ import annotations

from fastapi import APIRouter

from pkb.core.models.content import ContentType

router = APIRouter()


@router.get("/content-types", response_model=list[str])
async def list_content_types() -> list[str]:
    """Return all supported content types for client-side filtering."""
    return [t.value for t in ContentType]
