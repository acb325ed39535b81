from __future__ import annotations

from fastapi import APIRouter

from .endpoints import content, health, metadata, search, tags

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(content.router, prefix="/content", tags=["content"])
api_router.include_router(search.router, prefix="/search", tags=["search"])
api_router.include_router(tags.router, prefix="/tags", tags=["tags"])
api_router.include_router(metadata.router, prefix="/metadata", tags=["metadata"])
