from __future__ import annotations

from fastapi import Depends

from pkb.config import settings
from pkb.core.repositories.content_repository import ContentRepository
from pkb.core.repositories.embedding_store import EmbeddingStore
from pkb.core.repositories.implementations.sqlite.content_repository import (
    SqliteContentRepository,
)
from pkb.core.repositories.implementations.sqlite.embedding_store import (
    SqliteEmbeddingStore,
)
from pkb.core.services.content_service import ContentService
from pkb.core.services.embedding_service import (
    EmbeddingGenerator,
    EmbeddingService,
    OpenAIEmbeddingGenerator,
)
from pkb.core.services.search_service import SearchService
from pkb.core.services.summarize_service import OpenAISummarizer, SummarizeService, Summarizer
from pkb.db.base import Database, get_database
from pkb.utils.openai_client import get_openai_client


def get_db() -> Database:
    """Database shared by all requests; connections are opened per operation."""
    return get_database()


def get_content_repository(db: Database = Depends(get_db)) -> ContentRepository:
    return SqliteContentRepository(db, default_limit=settings.default_page_size)


def get_embedding_store(db: Database = Depends(get_db)) -> EmbeddingStore:
    return SqliteEmbeddingStore(db)


def get_embedding_generator() -> EmbeddingGenerator:
    """Embedding generator with explicit credentials and a bounded deadline."""
    return OpenAIEmbeddingGenerator(
        get_openai_client(),
        model=settings.embedding_model,
        timeout=settings.generator_timeout,
    )


def get_summarizer() -> Summarizer:
    return OpenAISummarizer(
        get_openai_client(),
        model=settings.summary_model,
        max_tokens=settings.summary_max_tokens,
        timeout=settings.generator_timeout,
    )


def get_content_service(repo: ContentRepository = Depends(get_content_repository)) -> ContentService:
    """Get a request-scoped content service instance."""
    return ContentService(repo)


def get_search_service(
    repo: ContentRepository = Depends(get_content_repository),
    generator: EmbeddingGenerator = Depends(get_embedding_generator),
) -> SearchService:
    """Get a request-scoped search service instance."""
    return SearchService(repo, generator, default_limit=settings.default_page_size)


def get_embedding_service(
    repo: ContentRepository = Depends(get_content_repository),
    store: EmbeddingStore = Depends(get_embedding_store),
    generator: EmbeddingGenerator = Depends(get_embedding_generator),
) -> EmbeddingService:
    return EmbeddingService(repo, store, generator)


def get_summarize_service(
    repo: ContentRepository = Depends(get_content_repository),
    summarizer: Summarizer = Depends(get_summarizer),
) -> SummarizeService:
    return SummarizeService(repo, summarizer)
