from __future__ import annotations

from typing import TYPE_CHECKING

from pkb.core.errors import StoreFailure, ValidationError
from pkb.core.schemas.search import SearchQuery, SearchResult
from pkb.core.services.embedding_service import decode_vector
from pkb.core.services.ranking import (
    DEFAULT_LIMIT,
    cosine_similarity,
    has_all_tags,
    normalize_limit,
    paginate,
    sort_by_score,
)
from pkb.utils.logging import get_logger

if TYPE_CHECKING:
    from pkb.core.repositories.content_repository import ContentRepository
    from pkb.core.services.embedding_service import EmbeddingGenerator

logger = get_logger(__name__)

SNIPPET_CONTEXT = 75
SNIPPET_FALLBACK_LENGTH = 150
ELLIPSIS = "..."


def _find_folded(text: str, query: str) -> tuple[int, int]:
    """Span of the first case-insensitive occurrence of `query` in `text`.

    Lowercasing can change a character's length ("İ" folds to two), so the
    match is found in the folded string and its offsets mapped back onto
    `text`. Returns (-1, -1) without a match.
    """
    folded_query = query.lower()
    index = text.lower().find(folded_query)
    if index == -1:
        return -1, -1

    # folded offset -> index of the character it came from
    origin: list[int] = []
    for i, char in enumerate(text):
        origin.extend([i] * len(char.lower()))
    return origin[index], origin[index + len(folded_query) - 1] + 1


def extract_snippet(text: str, query: str) -> str:
    """Excerpt of `text` around the first case-insensitive occurrence of `query`.

    Without a match, the first 150 characters are returned instead. Ellipses
    mark where the excerpt was cut.
    """
    if not text or not query:
        return ""

    match_start, match_end = _find_folded(text, query)
    if match_start == -1:
        if len(text) > SNIPPET_FALLBACK_LENGTH:
            return text[:SNIPPET_FALLBACK_LENGTH] + ELLIPSIS
        return text

    start = max(0, match_start - SNIPPET_CONTEXT)
    end = min(len(text), match_end + SNIPPET_CONTEXT)

    snippet = text[start:end]
    if start > 0:
        snippet = ELLIPSIS + snippet
    if end < len(text):
        snippet = snippet + ELLIPSIS
    return snippet


class SearchService:
    """Answers keyword and semantic searches over stored content.

    Keyword mode filters and paginates in SQL. Semantic mode embeds the query,
    scores every stored embedding of the configured model by cosine
    similarity, then filters by tag, sorts and paginates in memory.
    """

    def __init__(
        self,
        repo: ContentRepository,
        generator: EmbeddingGenerator,
        *,
        default_limit: int = DEFAULT_LIMIT,
    ) -> None:
        self._repo = repo
        self._generator = generator
        self._default_limit = default_limit

    async def search(self, query: SearchQuery) -> list[SearchResult]:
        if not query.query or not query.query.strip():
            raise ValidationError("Search query must be non-empty")
        if query.semantic:
            return await self.semantic_search(query)
        return await self.keyword_search(query)

    async def keyword_search(self, query: SearchQuery) -> list[SearchResult]:
        contents = await self._repo.keyword_search(
            query=query.query,
            content_type=query.type,
            tags=query.tags,
            limit=normalize_limit(query.limit, self._default_limit),
            offset=query.offset,
        )
        return [
            SearchResult(content=content, snippet=extract_snippet(content.body, query.query))
            for content in contents
        ]

    async def semantic_search(self, query: SearchQuery) -> list[SearchResult]:
        query_vector = await self._generator.generate(query.query)

        candidates = await self._repo.list_embedded(
            model=self._generator.model_name,
            content_type=query.type,
        )
        logger.debug("Scoring %d candidates for semantic query", len(candidates))

        scored: list[SearchResult] = []
        for content, raw_vector in candidates:
            if query.tags and not has_all_tags(content.tags, query.tags):
                continue
            try:
                vector = decode_vector(raw_vector)
            except ValueError as err:
                raise StoreFailure(
                    f"Failed to deserialize embedding: {err}",
                    content_id=content.id,
                ) from err
            scored.append(
                SearchResult(content=content, score=cosine_similarity(query_vector, vector))
            )

        page = paginate(sort_by_score(scored), query.offset, query.limit, self._default_limit)
        for result in page:
            result.snippet = extract_snippet(result.content.body, query.query)
        return page
