from __future__ import annotations

from pydantic import Field, field_validator

from pkb.core.models.base import AppBaseModel
from pkb.core.models.content import ContentType  # noqa: TCH001
from pkb.utils.validation import normalize_tags

from .content import ContentRead  # noqa: TCH001


class SearchRequest(AppBaseModel):
    query: str = Field(description="Free-text query")
    type: ContentType | None = None
    tags: list[str] = Field(default_factory=list, description="Content must carry all of these")
    limit: int = 10
    offset: int = Field(default=0, ge=0)
    semantic: bool = False

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return normalize_tags(v)


class SearchResultPublic(AppBaseModel):
    content: ContentRead
    score: float = 0.0
    snippet: str = ""
