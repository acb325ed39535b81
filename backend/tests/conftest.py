"""
Shared pytest fixtures for knowledge base tests.

Provides a temp-file database and deterministic fake generators so no test
touches the network.
"""

import asyncio
import hashlib

import pytest

from pkb.core.errors import GeneratorFailure
from pkb.core.repositories.implementations.sqlite.content_repository import SqliteContentRepository
from pkb.core.repositories.implementations.sqlite.embedding_store import SqliteEmbeddingStore
from pkb.core.services.embedding_service import EmbeddingGenerator
from pkb.core.services.summarize_service import Summarizer
from pkb.db.base import Database

FAKE_MODEL = "fake-embedding-model"


class FakeEmbeddingGenerator(EmbeddingGenerator):
    """
    Deterministic embedding generator for testing.

    Texts listed in `vectors` map to fixed vectors; anything else gets a
    vector derived from its hash.
    """

    dimension = 8

    def __init__(self, vectors: dict[str, list[float]] | None = None, model: str = FAKE_MODEL):
        self.model_name = model
        self.vectors = dict(vectors or {})
        self.calls: list[str] = []

    async def generate(self, text: str) -> list[float]:
        self.calls.append(text)
        if text in self.vectors:
            return list(self.vectors[text])
        h = hashlib.md5(text.encode()).hexdigest()
        return [int(h[i:i + 2], 16) / 255.0 for i in range(0, self.dimension * 2, 2)]


class FailingEmbeddingGenerator(EmbeddingGenerator):
    """Generator whose every call fails like an unavailable upstream."""

    def __init__(self, model: str = FAKE_MODEL):
        self.model_name = model
        self.calls = 0

    async def generate(self, text: str) -> list[float]:
        self.calls += 1
        raise GeneratorFailure("upstream unavailable", model=self.model_name)


class FakeSummarizer(Summarizer):
    """Returns the first sentence of the text."""

    async def summarize(self, text: str) -> str:
        return text.split(".")[0].strip() + "."


@pytest.fixture
async def db(tmp_path):
    database = Database(tmp_path / "pkb.db")
    await database.initialize()
    return database


@pytest.fixture
def repo(db):
    return SqliteContentRepository(db)


@pytest.fixture
def store(db):
    return SqliteEmbeddingStore(db)


@pytest.fixture
def fake_generator():
    return FakeEmbeddingGenerator()


@pytest.fixture
def sync_db(tmp_path):
    """Initialized database for synchronous (TestClient) tests."""
    database = Database(tmp_path / "api.db")
    asyncio.run(database.initialize())
    return database
