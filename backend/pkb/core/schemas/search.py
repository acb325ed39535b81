from __future__ import annotations

from pydantic import Field, field_validator

from pkb.core.models.base import AppBaseModel
from pkb.core.models.content import Content, ContentType  # noqa: TCH001
from pkb.utils.validation import normalize_tags


class SearchQuery(AppBaseModel):
    """A search request against the knowledge base.

    `semantic` selects between substring matching (False) and embedding
    similarity (True). Content must carry every tag in `tags`. A non-positive
    `limit` falls back to the default page size.
    """

    query: str = ""
    type: ContentType | None = None
    tags: list[str] = Field(default_factory=list)
    limit: int = 0
    offset: int = Field(default=0, ge=0)
    semantic: bool = False

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return normalize_tags(v)


class SearchResult(AppBaseModel):
    """Content matched by a search, with its similarity score and a preview snippet."""

    content: Content
    score: float = 0.0
    snippet: str = ""
