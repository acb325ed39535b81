from __future__ import annotations

from enum import Enum

from pydantic import Field, field_validator, model_validator

from pkb.utils.validation import normalize_tags

from .base import AppBaseModel, TimestampedModel


class ContentType(str, Enum):
    """Kind of stored artifact."""

    NOTE = "note"
    SNIPPET = "snippet"
    BOOKMARK = "bookmark"
    DOCUMENT = "document"


class Content(TimestampedModel):
    """A stored text artifact with metadata and tags.

    The body is the unit of embedding. `id` is None until the record has been
    persisted.
    """

    id: int | None = Field(default=None, description="Store-assigned identifier")
    type: ContentType = Field(default=ContentType.NOTE, description="Type of content")
    title: str = Field(default="", description="Content title")
    body: str = Field(default="", description="Free-text body")
    source_url: str | None = Field(default=None, description="Where the content came from")
    file_path: str | None = Field(default=None, description="Local file the content was read from")
    tags: list[str] = Field(default_factory=list, description="Tag names, no duplicates")

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return normalize_tags(v)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "type": "bookmark",
                    "title": "SQLite foreign keys",
                    "body": "Foreign key constraints are disabled by default and must be enabled per connection.",
                    "source_url": "https://www.sqlite.org/foreignkeys.html",
                    "tags": ["sqlite", "databases"],
                }
            ]
        }
    }


class Tag(AppBaseModel):
    """A label shared across content items. Names are unique and case-sensitive."""

    id: int
    name: str


class Embedding(AppBaseModel):
    """Vector derived from a content body by a given model."""

    id: int
    content_id: int
    vector: list[float]
    model: str
    dimensions: int

    @model_validator(mode="after")
    def validate_dimensions(self) -> Embedding:
        if self.dimensions != len(self.vector):
            raise ValueError(
                f"Embedding declares {self.dimensions} dimensions but vector has {len(self.vector)}"
            )
        return self
