from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pkb.core.models.content import Content, ContentType, Tag


class ContentRepository(ABC):
    """Abstract repository for content, tags and their associations.

    Every mutation runs in a single transaction: either all rows of the
    operation become visible or none do.
    """

    @abstractmethod
    async def create(self, content: Content) -> int:  # pragma: no cover - interface only
        """Insert the content and link its tags, creating missing tags. Return the new id."""

    @abstractmethod
    async def get(self, content_id: int) -> Content:  # pragma: no cover
        """Load content with its tags sorted by name. Raise NotFound if missing."""

    @abstractmethod
    async def list(
        self,
        *,
        content_type: ContentType | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Sequence[Content]:  # pragma: no cover
        """Return content newest first, optionally restricted to a type.

        A non-positive limit falls back to the default page size.
        """

    @abstractmethod
    async def update(self, content: Content) -> None:  # pragma: no cover
        """Replace mutable fields and the whole tag set of `content.id`.

        Updating an id that does not exist changes nothing.
        """

    @abstractmethod
    async def delete(self, content_id: int) -> bool:  # pragma: no cover
        """Delete content, its tag links and embeddings. Return True if a row was removed."""

    @abstractmethod
    async def list_tags(self) -> Sequence[Tag]:  # pragma: no cover
        """Return every tag ordered by name."""

    @abstractmethod
    async def create_tag(self, name: str) -> Tag:  # pragma: no cover
        """Ensure a tag exists and return it; an existing name resolves to its id."""

    @abstractmethod
    async def keyword_search(
        self,
        *,
        query: str,
        content_type: ContentType | None,
        tags: Sequence[str],
        limit: int,
        offset: int,
    ) -> Sequence[Content]:  # pragma: no cover
        """Case-insensitive substring match on title or body, newest first.

        Content must carry every tag in `tags`.
        """

    @abstractmethod
    async def list_embedded(
        self,
        *,
        model: str,
        content_type: ContentType | None,
    ) -> Sequence[tuple[Content, bytes]]:  # pragma: no cover
        """Return every content row with a stored embedding for `model`, paired with the raw vector."""
