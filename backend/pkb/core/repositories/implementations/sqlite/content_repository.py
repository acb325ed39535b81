from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pkb.core.errors import NotFound, ValidationError
from pkb.core.models.content import Content, Tag
from pkb.core.repositories.content_repository import ContentRepository
from pkb.db.base import utc_now
from pkb.utils.logging import get_logger
from pkb.utils.validation import normalize_tags

logger = get_logger(__name__)

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    import aiosqlite

    from pkb.core.models.content import ContentType
    from pkb.db.base import Database


# Stay well below SQLITE_MAX_VARIABLE_NUMBER on older builds
_IN_CHUNK = 500
# Largest value SQLite accepts as a bound integer parameter
_MAX_SQL_INT = 2**63 - 1


class SqliteContentRepository(ContentRepository):
    """SQLite implementation of the ContentRepository.

    Tags live in their own table and are linked through `content_tags`;
    deleting content cascades to links and embeddings via foreign keys.
    """

    TABLE_NAME = "content"
    COLUMNS = "c.id, c.type, c.title, c.body, c.source_url, c.file_path, c.created_at, c.updated_at"

    def __init__(self, db: Database, *, default_limit: int = 10) -> None:
        self._db = db
        self._default_limit = default_limit

    async def create(self, content: Content) -> int:
        now = utc_now()
        async with self._db.transaction() as conn:
            cursor = await conn.execute(
                f"""
                INSERT INTO {self.TABLE_NAME} (type, title, body, source_url, file_path, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (*self._content_to_params(content), now, now),
            )
            content_id = cursor.lastrowid
            await self._link_tags(conn, content_id, content.tags)
        logger.debug("Created content %s with tags %s", content_id, content.tags)
        return content_id

    async def get(self, content_id: int) -> Content:
        async with self._db.transaction(write=False) as conn:
            async with conn.execute(
                f"SELECT {self.COLUMNS} FROM {self.TABLE_NAME} c WHERE c.id = ?",
                (content_id,),
            ) as cursor:
                row = await cursor.fetchone()
            if row is None:
                raise NotFound(f"Content {content_id} not found", content_id=content_id)
            tags = await self._fetch_tags(conn, [content_id])
        return self._row_to_content(row, tags.get(content_id, []))

    async def list(
        self,
        *,
        content_type: ContentType | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> Sequence[Content]:
        sql = f"SELECT {self.COLUMNS} FROM {self.TABLE_NAME} c"
        params: list[Any] = []
        if content_type is not None:
            sql += " WHERE c.type = ?"
            params.append(content_type.value)
        sql += " ORDER BY c.created_at DESC, c.id DESC LIMIT ? OFFSET ?"
        params.extend([self._limit(limit), self._offset(offset)])
        return await self._select_with_tags(sql, params)

    async def update(self, content: Content) -> None:
        if content.id is None:
            raise ValidationError("Cannot update content without an id")
        async with self._db.transaction() as conn:
            cursor = await conn.execute(
                f"""
                UPDATE {self.TABLE_NAME}
                SET type = ?, title = ?, body = ?, source_url = ?, file_path = ?, updated_at = ?
                WHERE id = ?
                """,
                (*self._content_to_params(content), utc_now(), content.id),
            )
            if cursor.rowcount == 0:
                logger.debug("Update of missing content %s ignored", content.id)
                return
            await conn.execute("DELETE FROM content_tags WHERE content_id = ?", (content.id,))
            await self._link_tags(conn, content.id, content.tags)

    async def delete(self, content_id: int) -> bool:
        async with self._db.transaction() as conn:
            cursor = await conn.execute(
                f"DELETE FROM {self.TABLE_NAME} WHERE id = ?",
                (content_id,),
            )
            deleted = cursor.rowcount > 0
        return deleted

    async def list_tags(self) -> Sequence[Tag]:
        async with self._db.connect() as conn:
            async with conn.execute("SELECT id, name FROM tags ORDER BY name") as cursor:
                rows = await cursor.fetchall()
        return [Tag(id=row["id"], name=row["name"]) for row in rows]

    async def create_tag(self, name: str) -> Tag:
        names = normalize_tags([name])
        if not names:
            raise ValidationError("Tag name must be non-empty")
        async with self._db.transaction() as conn:
            tag_id = await self._ensure_tag(conn, names[0])
        return Tag(id=tag_id, name=names[0])

    async def keyword_search(
        self,
        *,
        query: str,
        content_type: ContentType | None,
        tags: Sequence[str],
        limit: int,
        offset: int,
    ) -> Sequence[Content]:
        # instr() keeps % and _ in the query literal, unlike LIKE
        sql = f"""
            SELECT {self.COLUMNS} FROM {self.TABLE_NAME} c
            WHERE (instr(py_lower(c.title), py_lower(?)) > 0 OR instr(py_lower(c.body), py_lower(?)) > 0)
        """
        params: list[Any] = [query, query]

        if content_type is not None:
            sql += " AND c.type = ?"
            params.append(content_type.value)

        required = normalize_tags(tags)
        if required:
            placeholders = ", ".join("?" for _ in required)
            sql += f"""
                AND c.id IN (
                    SELECT ct.content_id
                    FROM content_tags ct
                    JOIN tags t ON ct.tag_id = t.id
                    WHERE t.name IN ({placeholders})
                    GROUP BY ct.content_id
                    HAVING COUNT(DISTINCT t.name) = ?
                )
            """
            params.extend(required)
            params.append(len(required))

        sql += " ORDER BY c.created_at DESC, c.id DESC LIMIT ? OFFSET ?"
        params.extend([self._limit(limit), self._offset(offset)])
        return await self._select_with_tags(sql, params)

    async def list_embedded(
        self,
        *,
        model: str,
        content_type: ContentType | None,
    ) -> Sequence[tuple[Content, bytes]]:
        sql = f"""
            SELECT {self.COLUMNS}, e.embedding
            FROM {self.TABLE_NAME} c
            JOIN embeddings e ON e.content_id = c.id
            WHERE e.model = ?
        """
        params: list[Any] = [model]
        if content_type is not None:
            sql += " AND c.type = ?"
            params.append(content_type.value)
        sql += " ORDER BY c.created_at DESC, c.id DESC"

        async with self._db.transaction(write=False) as conn:
            async with conn.execute(sql, params) as cursor:
                rows = await cursor.fetchall()
            tags = await self._fetch_tags(conn, [row["id"] for row in rows])

        candidates: list[tuple[Content, bytes]] = []
        for row in rows:
            content = self._row_to_content(row, tags.get(row["id"], []))
            candidates.append((content, bytes(row["embedding"])))
        return candidates

    async def _select_with_tags(self, sql: str, params: Sequence[Any]) -> list[Content]:
        async with self._db.transaction(write=False) as conn:
            async with conn.execute(sql, params) as cursor:
                rows = await cursor.fetchall()
            tags = await self._fetch_tags(conn, [row["id"] for row in rows])
        return [self._row_to_content(row, tags.get(row["id"], [])) for row in rows]

    def _limit(self, limit: int) -> int:
        return min(limit, _MAX_SQL_INT) if limit > 0 else self._default_limit

    @staticmethod
    def _offset(offset: int) -> int:
        return min(max(0, offset), _MAX_SQL_INT)

    async def _link_tags(self, conn: aiosqlite.Connection, content_id: int, tags: Iterable[str]) -> None:
        for name in normalize_tags(tags):
            tag_id = await self._ensure_tag(conn, name)
            await conn.execute(
                "INSERT OR IGNORE INTO content_tags (content_id, tag_id) VALUES (?, ?)",
                (content_id, tag_id),
            )

    @staticmethod
    async def _ensure_tag(conn: aiosqlite.Connection, name: str) -> int:
        await conn.execute("INSERT OR IGNORE INTO tags (name) VALUES (?)", (name,))
        async with conn.execute("SELECT id FROM tags WHERE name = ?", (name,)) as cursor:
            row = await cursor.fetchone()
        return row["id"]

    @staticmethod
    async def _fetch_tags(conn: aiosqlite.Connection, content_ids: Sequence[int]) -> dict[int, list[str]]:
        """Map each content id to its tag names, sorted lexicographically."""
        tags: dict[int, list[str]] = {}
        for start in range(0, len(content_ids), _IN_CHUNK):
            chunk = list(content_ids[start:start + _IN_CHUNK])
            placeholders = ", ".join("?" for _ in chunk)
            async with conn.execute(
                f"""
                SELECT ct.content_id, t.name
                FROM content_tags ct
                JOIN tags t ON t.id = ct.tag_id
                WHERE ct.content_id IN ({placeholders})
                ORDER BY t.name
                """,
                chunk,
            ) as cursor:
                async for row in cursor:
                    tags.setdefault(row["content_id"], []).append(row["name"])
        return tags

    @staticmethod
    def _content_to_params(content: Content) -> tuple[Any, ...]:
        return (
            content.type.value,
            content.title,
            content.body,
            content.source_url,
            content.file_path,
        )

    @staticmethod
    def _row_to_content(row: aiosqlite.Row, tags: list[str]) -> Content:
        normalized = {key: row[key] for key in row.keys() if key != "embedding"}
        normalized["tags"] = tags
        return Content.model_validate(normalized)
