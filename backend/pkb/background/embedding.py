from __future__ import annotations

from typing import TYPE_CHECKING

from pkb.core.services.embedding_service import encode_vector
from pkb.utils.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from pkb.core.repositories.embedding_store import EmbeddingStore
    from pkb.core.services.embedding_service import EmbeddingGenerator


async def generate_and_store_content_embedding(
    *,
    content_id: int,
    body: str,
    generator: EmbeddingGenerator,
    store: EmbeddingStore,
) -> None:
    """Generate the embedding for a content body and persist it as background work.

    Runs after the triggering write has committed and the response has been
    sent. Never raises: failures are logged and the content simply stays out
    of semantic search until a later write or an explicit embed request.
    """
    try:
        if not body.strip():
            logger.warning("No text to embed for content %s", content_id)
            return

        vector = await generator.generate(body)
        embedding_id = await store.upsert(
            content_id,
            encode_vector(vector),
            generator.model_name,
            len(vector),
        )
        logger.info(
            "Stored embedding %s for content %s (%s, %d dims)",
            embedding_id,
            content_id,
            generator.model_name,
            len(vector),
        )
    except Exception as err:  # noqa: BLE001 - background job must not fail the write
        logger.error("Embedding job failed for content %s: %s", content_id, err)
