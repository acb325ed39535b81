from __future__ import annotations

from datetime import datetime  # noqa: TCH003

from pydantic import Field, field_validator

from pkb.core.models.base import AppBaseModel
from pkb.core.models.content import ContentType  # noqa: TCH001
from pkb.utils.validation import normalize_tags


class ContentCreate(AppBaseModel):
    type: ContentType = Field(default=ContentType.NOTE, description="Type of content")
    title: str = Field(default="", description="Content title")
    body: str = Field(default="", description="Free-text body")
    source_url: str | None = Field(default=None, description="Where the content came from")
    file_path: str | None = Field(default=None, description="Local file path")
    tags: list[str] = Field(default_factory=list, description="Tag names")

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return normalize_tags(v)


class ContentUpdate(ContentCreate):
    """Full replacement of a content record; omitted fields reset to their defaults."""


class ContentRead(AppBaseModel):
    id: int
    type: ContentType
    title: str
    body: str
    source_url: str | None
    file_path: str | None
    tags: list[str]
    created_at: datetime
    updated_at: datetime


class EmbeddingRead(AppBaseModel):
    embedding_id: int
    content_id: int
    model: str
    dimensions: int


class SummaryRead(AppBaseModel):
    content_id: int
    summary: str
