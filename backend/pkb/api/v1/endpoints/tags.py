from __future__ import annotations

from fastapi import APIRouter, Depends, status

from pkb.api.v1.schemas.tag import TagCreate, TagRead
from pkb.core.services.content_service import ContentService
from pkb.dependencies import get_content_service

router = APIRouter()


@router.get("", response_model=list[TagRead])
async def list_tags(service: ContentService = Depends(get_content_service)):
    tags = await service.list_tags()
    return [TagRead.model_validate(t) for t in tags]


@router.post("", response_model=TagRead, status_code=status.HTTP_201_CREATED)
async def create_tag(
    payload: TagCreate,
    service: ContentService = Depends(get_content_service),
):
    """Create a tag; an existing name returns the existing tag."""
    tag = await service.create_tag(payload.name)
    return TagRead.model_validate(tag)
