from __future__ import annotations

from fastapi import APIRouter, Depends

from pkb.api.v1.schemas.search import SearchRequest, SearchResultPublic
from pkb.core.schemas.search import SearchQuery
from pkb.core.services.search_service import SearchService
from pkb.dependencies import get_search_service

router = APIRouter()


@router.post("", response_model=list[SearchResultPublic])
async def search_content(
    payload: SearchRequest,
    service: SearchService = Depends(get_search_service),
):
    """Search content by substring match or, with `semantic`, by embedding similarity."""
    query = SearchQuery.model_validate(payload.model_dump())
    results = await service.search(query)
    return [SearchResultPublic.model_validate(r) for r in results]
