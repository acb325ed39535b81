from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from pkb.api.v1.schemas.content import (
    ContentCreate,
    ContentRead,
    ContentUpdate,
    EmbeddingRead,
    SummaryRead,
)
from pkb.background import generate_and_store_content_embedding
from pkb.core.models.content import ContentType
from pkb.core.repositories.embedding_store import EmbeddingStore
from pkb.core.services.content_service import ContentService
from pkb.core.services.embedding_service import EmbeddingGenerator, EmbeddingService
from pkb.core.services.summarize_service import SummarizeService
from pkb.dependencies import (
    get_content_service,
    get_embedding_generator,
    get_embedding_service,
    get_embedding_store,
    get_summarize_service,
)

router = APIRouter()


@router.post("", response_model=ContentRead, status_code=status.HTTP_201_CREATED)
async def create_content(
    payload: ContentCreate,
    background_tasks: BackgroundTasks,
    service: ContentService = Depends(get_content_service),
    generator: EmbeddingGenerator = Depends(get_embedding_generator),
    store: EmbeddingStore = Depends(get_embedding_store),
):
    content = await service.create_content(payload)
    if content.body.strip():
        background_tasks.add_task(
            generate_and_store_content_embedding,
            content_id=content.id,
            body=content.body,
            generator=generator,
            store=store,
        )
    return ContentRead.model_validate(content)


@router.get("", response_model=list[ContentRead])
async def list_content(
    type: ContentType | None = None,  # noqa: A002 - public query parameter name
    limit: int = Query(default=10),
    offset: int = Query(default=0, ge=0),
    service: ContentService = Depends(get_content_service),
):
    contents = await service.list_content(content_type=type, limit=limit, offset=offset)
    return [ContentRead.model_validate(c) for c in contents]


@router.get("/{content_id}", response_model=ContentRead)
async def get_content(
    content_id: int,
    service: ContentService = Depends(get_content_service),
):
    content = await service.get_content(content_id)
    return ContentRead.model_validate(content)


@router.put("/{content_id}", response_model=ContentRead)
async def update_content(
    content_id: int,
    payload: ContentUpdate,
    background_tasks: BackgroundTasks,
    service: ContentService = Depends(get_content_service),
    generator: EmbeddingGenerator = Depends(get_embedding_generator),
    store: EmbeddingStore = Depends(get_embedding_store),
):
    content = await service.update_content(content_id, payload)
    if content.body.strip():
        background_tasks.add_task(
            generate_and_store_content_embedding,
            content_id=content.id,
            body=content.body,
            generator=generator,
            store=store,
        )
    return ContentRead.model_validate(content)


@router.delete("/{content_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_content(
    content_id: int,
    service: ContentService = Depends(get_content_service),
):
    await service.delete_content(content_id)
    return None


@router.post("/{content_id}/embed", response_model=EmbeddingRead)
async def embed_content(
    content_id: int,
    service: EmbeddingService = Depends(get_embedding_service),
):
    """Generate and store the embedding now, within this request's deadline."""
    embedding = await service.embed_content(content_id)
    return EmbeddingRead(
        embedding_id=embedding.id,
        content_id=embedding.content_id,
        model=embedding.model,
        dimensions=embedding.dimensions,
    )


@router.post("/{content_id}/summarize", response_model=SummaryRead)
async def summarize_content(
    content_id: int,
    service: SummarizeService = Depends(get_summarize_service),
):
    summary = await service.summarize_content(content_id)
    return SummaryRead(content_id=content_id, summary=summary)
