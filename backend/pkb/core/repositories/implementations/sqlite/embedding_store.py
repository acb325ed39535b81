from __future__ import annotations

from typing import TYPE_CHECKING

from pkb.core.errors import NotFound, StoreFailure
from pkb.core.models.content import Embedding
from pkb.core.repositories.embedding_store import EmbeddingStore
from pkb.core.services.embedding_service import decode_vector
from pkb.utils.logging import get_logger

if TYPE_CHECKING:
    from pkb.db.base import Database

logger = get_logger(__name__)


class SqliteEmbeddingStore(EmbeddingStore):
    """Embeddings keyed by (content_id, model) in the `embeddings` table."""

    TABLE_NAME = "embeddings"

    def __init__(self, db: Database) -> None:
        self._db = db

    async def upsert(self, content_id: int, vector: bytes, model: str, dimensions: int) -> int:
        async with self._db.transaction() as conn:
            async with conn.execute(
                f"SELECT id FROM {self.TABLE_NAME} WHERE content_id = ? AND model = ?",
                (content_id, model),
            ) as cursor:
                row = await cursor.fetchone()

            if row is not None:
                embedding_id = row["id"]
                await conn.execute(
                    f"UPDATE {self.TABLE_NAME} SET embedding = ?, dimensions = ? WHERE id = ?",
                    (vector, dimensions, embedding_id),
                )
                logger.debug("Replaced embedding %s for content %s", embedding_id, content_id)
                return embedding_id

            cursor = await conn.execute(
                f"""
                INSERT INTO {self.TABLE_NAME} (content_id, embedding, model, dimensions)
                VALUES (?, ?, ?, ?)
                """,
                (content_id, vector, model, dimensions),
            )
            embedding_id = cursor.lastrowid
        logger.debug("Inserted embedding %s for content %s", embedding_id, content_id)
        return embedding_id

    async def get(self, content_id: int, model: str) -> Embedding:
        async with self._db.connect() as conn:
            async with conn.execute(
                f"""
                SELECT id, content_id, embedding, model, dimensions
                FROM {self.TABLE_NAME}
                WHERE content_id = ? AND model = ?
                """,
                (content_id, model),
            ) as cursor:
                row = await cursor.fetchone()
        if row is None:
            raise NotFound(
                f"No {model} embedding for content {content_id}",
                content_id=content_id,
                model=model,
            )
        try:
            vector = decode_vector(row["embedding"])
        except ValueError as err:
            raise StoreFailure(str(err), content_id=content_id, model=model) from err
        return Embedding(
            id=row["id"],
            content_id=row["content_id"],
            vector=vector,
            model=row["model"],
            dimensions=row["dimensions"],
        )

    async def count(self, content_id: int, model: str | None = None) -> int:
        sql = f"SELECT COUNT(*) AS n FROM {self.TABLE_NAME} WHERE content_id = ?"
        params: list[object] = [content_id]
        if model is not None:
            sql += " AND model = ?"
            params.append(model)
        async with self._db.connect() as conn:
            async with conn.execute(sql, params) as cursor:
                row = await cursor.fetchone()
        return row["n"]
