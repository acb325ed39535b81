from __future__ import annotations

import sqlite3
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite

from pkb.config import settings
from pkb.core.errors import StoreFailure
from pkb.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = get_logger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS content (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    type TEXT NOT NULL,
    title TEXT NOT NULL DEFAULT '',
    body TEXT NOT NULL DEFAULT '',
    source_url TEXT,
    file_path TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_content_created_at ON content(created_at);
CREATE INDEX IF NOT EXISTS idx_content_type ON content(type);

CREATE TABLE IF NOT EXISTS tags (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE
);

CREATE TABLE IF NOT EXISTS content_tags (
    content_id INTEGER NOT NULL REFERENCES content(id) ON DELETE CASCADE,
    tag_id INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
    PRIMARY KEY (content_id, tag_id)
);

CREATE INDEX IF NOT EXISTS idx_content_tags_tag_id ON content_tags(tag_id);

CREATE TABLE IF NOT EXISTS embeddings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    content_id INTEGER NOT NULL REFERENCES content(id) ON DELETE CASCADE,
    embedding BLOB NOT NULL,
    model TEXT NOT NULL,
    dimensions INTEGER NOT NULL,
    UNIQUE (content_id, model)
);
"""


def _py_lower(value: str | None) -> str | None:
    # SQLite's lower() folds ASCII only
    return value.lower() if value is not None else None


def utc_now() -> str:
    """Current UTC time as sortable ISO-8601 text with fixed microsecond precision."""
    return datetime.now(UTC).isoformat(timespec="microseconds")


class Database:
    """SQLite database holding content, tags and embeddings.

    Every operation opens its own connection so concurrent requests never
    share transaction state; SQLite's locking serializes writers.
    """

    def __init__(self, path: Path | str, *, busy_timeout: float = 5.0) -> None:
        self._path = Path(path)
        self._busy_timeout = busy_timeout

    @property
    def path(self) -> Path:
        return self._path

    async def initialize(self) -> None:
        """Create the database directory and schema if missing."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        async with self.connect() as conn:
            await conn.execute("PRAGMA journal_mode = WAL")
            await conn.executescript(SCHEMA)
        logger.info("Database initialized at %s", self._path)

    @asynccontextmanager
    async def connect(self) -> AsyncIterator[aiosqlite.Connection]:
        """Open a connection in autocommit mode with foreign keys enforced.

        Any sqlite error raised while the connection is in use is re-raised
        as StoreFailure.
        """
        try:
            conn = await aiosqlite.connect(
                self._path,
                timeout=self._busy_timeout,
                isolation_level=None,
            )
        except sqlite3.Error as err:
            logger.warning("Failed to open database %s: %s", self._path, err)
            raise StoreFailure(f"Failed to open database: {err}") from err

        try:
            conn.row_factory = aiosqlite.Row
            await conn.execute("PRAGMA foreign_keys = ON")
            await conn.create_function("py_lower", 1, _py_lower, deterministic=True)
            yield conn
        except sqlite3.Error as err:
            logger.warning("Database operation failed: %s", err)
            raise StoreFailure(str(err)) from err
        finally:
            await conn.close()

    @asynccontextmanager
    async def transaction(self, *, write: bool = True) -> AsyncIterator[aiosqlite.Connection]:
        """Run the enclosed statements as one transaction.

        Commits on normal exit; rolls back and re-raises on any exception, so
        no partial writes become visible. Write transactions take the write
        lock up front; read transactions see one consistent snapshot.
        """
        async with self.connect() as conn:
            await conn.execute("BEGIN IMMEDIATE" if write else "BEGIN")
            try:
                yield conn
            except BaseException:
                await conn.execute("ROLLBACK")
                raise
            await conn.execute("COMMIT")

    async def ping(self) -> None:
        async with self.connect() as conn:
            await conn.execute("SELECT 1")


@lru_cache(maxsize=1)
def get_database() -> Database:
    """Return the process-wide Database bound to the configured path."""
    logger.debug("Using database at %s", settings.database_path)
    return Database(settings.database_path)
