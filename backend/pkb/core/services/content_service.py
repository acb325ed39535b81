from __future__ import annotations

from typing import TYPE_CHECKING

from pkb.core.errors import NotFound, ValidationError
from pkb.core.models.content import Content, ContentType

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pkb.core.models.content import Tag
    from pkb.core.repositories.content_repository import ContentRepository


class ContentService:
    """Application logic for content and tags (validation, existence checks)."""

    def __init__(self, repo: ContentRepository) -> None:
        self._repo = repo

    async def create_content(self, create_dto) -> Content:
        """Persist new content and return it as stored, tags included."""
        content = self._build(create_dto)
        content_id = await self._repo.create(content)
        return await self._repo.get(content_id)

    async def get_content(self, content_id: int) -> Content:
        return await self._repo.get(content_id)

    async def list_content(
        self,
        *,
        content_type: ContentType | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Sequence[Content]:
        """List content newest first."""
        return await self._repo.list(content_type=content_type, limit=limit, offset=offset)

    async def update_content(self, content_id: int, update_dto) -> Content:
        """Replace every mutable field and the whole tag set of existing content."""
        await self._repo.get(content_id)
        content = self._build(update_dto, content_id=content_id)
        await self._repo.update(content)
        return await self._repo.get(content_id)

    async def delete_content(self, content_id: int) -> None:
        if not await self._repo.delete(content_id):
            raise NotFound(f"Content {content_id} not found", content_id=content_id)

    async def list_tags(self) -> Sequence[Tag]:
        return await self._repo.list_tags()

    async def create_tag(self, name: str) -> Tag:
        return await self._repo.create_tag(name)

    @staticmethod
    def _build(dto, *, content_id: int | None = None) -> Content:
        title = (getattr(dto, "title", None) or "").strip()
        body = (getattr(dto, "body", None) or "").strip()
        if not (title or body):
            raise ValidationError("Either title or body must be provided and non-empty")

        return Content(
            id=content_id,
            type=getattr(dto, "type", None) or ContentType.NOTE,
            title=title,
            body=body,
            source_url=getattr(dto, "source_url", None) or None,
            file_path=getattr(dto, "file_path", None) or None,
            tags=getattr(dto, "tags", None) or [],
        )
