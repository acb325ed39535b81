from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pkb.core.models.content import Embedding


class EmbeddingStore(ABC):
    """Persists at most one embedding per (content, model) pair."""

    @abstractmethod
    async def upsert(self, content_id: int, vector: bytes, model: str, dimensions: int) -> int:  # pragma: no cover
        """Store a serialized vector, replacing any existing one for the same key.

        Returns the embedding id. The lookup and the write are separate
        statements, so concurrent upserts for the same key are only
        eventually consistent.
        """

    @abstractmethod
    async def get(self, content_id: int, model: str) -> Embedding:  # pragma: no cover
        """Return the decoded embedding or raise NotFound."""

    @abstractmethod
    async def count(self, content_id: int, model: str | None = None) -> int:  # pragma: no cover
        """Number of embedding rows for a content id, optionally for one model."""
