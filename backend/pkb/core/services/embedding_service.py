from __future__ import annotations

import asyncio
import json
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from openai import APITimeoutError, OpenAIError

from pkb.core.errors import GeneratorFailure, GeneratorTimeout, ValidationError
from pkb.core.models.content import Embedding
from pkb.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from openai import AsyncOpenAI

    from pkb.core.repositories.content_repository import ContentRepository
    from pkb.core.repositories.embedding_store import EmbeddingStore

logger = get_logger(__name__)


def encode_vector(vector: Sequence[float]) -> bytes:
    """Serialize a vector as a JSON float array; round-trips Python floats exactly."""
    return json.dumps([float(x) for x in vector]).encode("utf-8")


def decode_vector(data: bytes | str) -> list[float]:
    """Inverse of `encode_vector`. Raises ValueError on malformed payloads."""
    try:
        values = json.loads(data)
    except (TypeError, ValueError) as err:
        raise ValueError(f"Malformed embedding payload: {err}") from err
    if not isinstance(values, list):
        raise ValueError("Embedding payload is not an array")
    return [float(v) for v in values]


class EmbeddingGenerator(ABC):
    """Turns text into a fixed-length vector.

    The same generator (and model) must be used for indexing and querying,
    otherwise stored and query vectors are not comparable.
    """

    model_name: str

    @abstractmethod
    async def generate(self, text: str) -> list[float]:  # pragma: no cover - interface only
        """Return the embedding for `text` or raise GeneratorFailure."""


class OpenAIEmbeddingGenerator(EmbeddingGenerator):
    """Embedding generator backed by the OpenAI embeddings endpoint.

    Every call is bounded by `timeout`; cancelling the awaiting task cancels
    the outbound request.
    """

    def __init__(self, client: AsyncOpenAI, *, model: str, timeout: float) -> None:
        self._client = client
        self.model_name = model
        self._timeout = timeout

    async def generate(self, text: str) -> list[float]:
        if not text or not text.strip():
            raise ValidationError("Cannot embed empty text")

        try:
            resp = await asyncio.wait_for(
                self._client.embeddings.create(model=self.model_name, input=text),
                timeout=self._timeout,
            )
        except (TimeoutError, APITimeoutError) as err:
            logger.warning("Embedding request timed out after %.1fs", self._timeout)
            raise GeneratorTimeout(model=self.model_name) from err
        except OpenAIError as err:
            logger.warning("Failed to create embedding: %s", err)
            raise GeneratorFailure(f"Failed to create embedding: {err}", model=self.model_name) from err

        if not resp.data:
            raise GeneratorFailure("No embedding data returned", model=self.model_name)
        return list(resp.data[0].embedding)


class EmbeddingService:
    """Generates and stores the embedding of one content item on request."""

    def __init__(
        self,
        repo: ContentRepository,
        store: EmbeddingStore,
        generator: EmbeddingGenerator,
    ) -> None:
        self._repo = repo
        self._store = store
        self._generator = generator

    async def embed_content(self, content_id: int) -> Embedding:
        content = await self._repo.get(content_id)
        if not content.body.strip():
            raise ValidationError("Content has no text to embed", content_id=content_id)

        vector = await self._generator.generate(content.body)
        model = self._generator.model_name
        embedding_id = await self._store.upsert(content_id, encode_vector(vector), model, len(vector))
        logger.info("Stored %d-dim embedding for content %s (%s)", len(vector), content_id, model)
        return Embedding(
            id=embedding_id,
            content_id=content_id,
            vector=vector,
            model=model,
            dimensions=len(vector),
        )
